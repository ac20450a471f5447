from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from studymate_shared.errors import ProviderTimeout

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: Optional[float], operation: str) -> T:
    """Await ``awaitable`` for at most ``timeout`` seconds (``None`` waits forever)."""

    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise ProviderTimeout(f"{operation} timed out after {timeout}s") from exc
