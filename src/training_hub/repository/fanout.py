"""Ejecución concurrente acotada."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int = 4,
) -> list[R]:
    """Aplicar `fn` a cada elemento con como mucho `limit` llamadas en vuelo.

    Conserva el orden de entrada. Un error en cualquier llamada se propaga.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(item: T) -> R:
        async with semaphore:
            return await fn(item)

    return list(await asyncio.gather(*(run(item) for item in items)))
