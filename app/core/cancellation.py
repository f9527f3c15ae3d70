import asyncio
import logging
import threading
from typing import Callable, TypeVar

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from app.core.config import DISCONNECT_POLL_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_until_disconnect(
    request: Request,
    func: Callable[..., T],
    *args,
    **kwargs,
) -> T:
    """
    Run a blocking service call in the threadpool with a fresh `cancel_event`.

    The event is set as soon as the client disconnects; the service checks it
    between units of work and raises RollupCancelledError.
    """
    cancel_event = threading.Event()
    work = asyncio.ensure_future(
        run_in_threadpool(func, *args, cancel_event=cancel_event, **kwargs)
    )

    while True:
        done, _ = await asyncio.wait({work}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            return work.result()
        if await request.is_disconnected():
            logger.info("Client left %s %s, cancelling", request.method, request.url.path)
            cancel_event.set()
            return await work
