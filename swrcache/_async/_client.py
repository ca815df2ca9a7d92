import typing as tp

import httpx

from .._controller import SWRController
from .._dispatchers import AsyncBaseDispatcher
from ._transports import AsyncSWRTransport

__all__ = ("AsyncSWRClient",)


class AsyncSWRClient(httpx.AsyncClient):
    """
    An `httpx.AsyncClient` whose transports apply stale-while-revalidate.

    Pass the caching transport to wrap with `transport=` (or through `mounts=`).
    """

    def __init__(
        self,
        *args: tp.Any,
        controller: tp.Optional[SWRController] = None,
        dispatcher: tp.Optional[AsyncBaseDispatcher] = None,
        **kwargs: tp.Any,
    ):
        self._controller = controller
        self._dispatcher = dispatcher
        super().__init__(*args, **kwargs)

    def _init_transport(self, *args, **kwargs) -> AsyncSWRTransport:  # type: ignore
        _transport = super()._init_transport(*args, **kwargs)
        return AsyncSWRTransport(
            transport=_transport,
            controller=self._controller,
            dispatcher=self._dispatcher,
        )

    def _init_proxy_transport(self, *args, **kwargs) -> AsyncSWRTransport:  # type: ignore
        _transport = super()._init_proxy_transport(*args, **kwargs)  # pragma: no cover
        return AsyncSWRTransport(  # pragma: no cover
            transport=_transport,
            controller=self._controller,
            dispatcher=self._dispatcher,
        )
