"""Entry point for `python -m prodtrail`.

Usage:
    python -m prodtrail
"""

from __future__ import annotations

import asyncio

from prodtrail.app import main

asyncio.run(main())
