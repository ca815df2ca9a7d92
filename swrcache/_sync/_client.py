import typing as tp

import httpx

from .._controller import SWRController
from .._dispatchers import BaseDispatcher
from ._transports import SWRTransport

__all__ = ("SWRClient",)


class SWRClient(httpx.Client):
    """
    An `httpx.Client` whose transports apply stale-while-revalidate.

    Pass the caching transport to wrap with `transport=` (or through `mounts=`).
    """

    def __init__(
        self,
        *args: tp.Any,
        controller: tp.Optional[SWRController] = None,
        dispatcher: tp.Optional[BaseDispatcher] = None,
        **kwargs: tp.Any,
    ):
        self._controller = controller
        self._dispatcher = dispatcher
        super().__init__(*args, **kwargs)

    def _init_transport(self, *args, **kwargs) -> SWRTransport:  # type: ignore
        _transport = super()._init_transport(*args, **kwargs)
        return SWRTransport(
            transport=_transport,
            controller=self._controller,
            dispatcher=self._dispatcher,
        )

    def _init_proxy_transport(self, *args, **kwargs) -> SWRTransport:  # type: ignore
        _transport = super()._init_proxy_transport(*args, **kwargs)  # pragma: no cover
        return SWRTransport(  # pragma: no cover
            transport=_transport,
            controller=self._controller,
            dispatcher=self._dispatcher,
        )
