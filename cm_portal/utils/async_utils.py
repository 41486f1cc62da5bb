import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")


async def run_sync(fn: Callable[..., T], *args, **kwargs) -> T:
    """Run a blocking callable on the default thread pool.

    The Cosmos and Blob Storage SDK clients used here are synchronous, so
    every call made from a request handler goes through this helper to keep
    the event loop free.
    """
    return await asyncio.to_thread(fn, *args, **kwargs)
