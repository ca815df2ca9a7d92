from __future__ import annotations

import abc
import contextlib
import types
import typing as tp
from concurrent.futures import ThreadPoolExecutor

import anyio
from anyio.abc import TaskGroup

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = (
    "AsyncBackgroundDispatcher",
    "AsyncBaseDispatcher",
    "AsyncInlineDispatcher",
    "BackgroundDispatcher",
    "BaseDispatcher",
    "InlineDispatcher",
)

Revalidation = tp.Callable[[], None]
AsyncRevalidation = tp.Callable[[], tp.Awaitable[None]]


def run_discarding_outcome(revalidation: Revalidation) -> None:
    # The revalidation only warms the cache; its failure is never surfaced.
    with contextlib.suppress(Exception):
        revalidation()


async def arun_discarding_outcome(revalidation: AsyncRevalidation) -> None:
    with contextlib.suppress(Exception):
        await revalidation()


class BaseDispatcher(abc.ABC):
    """
    Runs the revalidations triggered for stale-but-servable responses.
    """

    @abc.abstractmethod
    def submit(self, revalidation: Revalidation) -> None: ...

    def close(self) -> None:
        pass

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self.close()


class InlineDispatcher(BaseDispatcher):
    """
    Runs the revalidation on the caller's thread before the cached response
    is returned. The caller pays the latency of the round trip.
    """

    def submit(self, revalidation: Revalidation) -> None:
        run_discarding_outcome(revalidation)


class BackgroundDispatcher(BaseDispatcher):
    """
    Runs revalidations on a thread pool and returns immediately.

    Closing the dispatcher waits for the revalidations still in flight.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="swrcache-revalidation")

    def submit(self, revalidation: Revalidation) -> None:
        self._executor.submit(run_discarding_outcome, revalidation)

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class AsyncBaseDispatcher(abc.ABC):
    @abc.abstractmethod
    async def submit(self, revalidation: AsyncRevalidation) -> None: ...

    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> "Self":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        await self.aclose()


class AsyncInlineDispatcher(AsyncBaseDispatcher):
    async def submit(self, revalidation: AsyncRevalidation) -> None:
        await arun_discarding_outcome(revalidation)


class AsyncBackgroundDispatcher(AsyncBaseDispatcher):
    """
    Starts revalidations in an anyio task group and returns immediately.

    The dispatcher must be entered with `async with` (the transport does this
    in its own `__aenter__`). Leaving it waits for the revalidations still in flight.
    """

    def __init__(self) -> None:
        self._task_group: TaskGroup | None = None

    async def submit(self, revalidation: AsyncRevalidation) -> None:
        if self._task_group is None:
            raise RuntimeError(
                "AsyncBackgroundDispatcher is not running, use it as an async context manager "
                "(or enter the transport or client that owns it)."
            )
        self._task_group.start_soon(arun_discarding_outcome, revalidation)

    async def aclose(self) -> None:
        task_group, self._task_group = self._task_group, None
        if task_group is not None:
            await task_group.__aexit__(None, None, None)

    async def __aenter__(self) -> "Self":
        if self._task_group is None:
            task_group = anyio.create_task_group()
            await task_group.__aenter__()
            self._task_group = task_group
        return self
