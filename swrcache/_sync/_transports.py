from __future__ import annotations

import logging
import types
import typing as tp
from functools import partial

import httpx
from httpx import Request, Response

from .._controller import SWRController
from .._dispatchers import BaseDispatcher, InlineDispatcher
from .._models import SWRState
from .._utils import get_safe_url

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("SWRTransport",)

logger = logging.getLogger("swrcache.transports")


class SWRTransport(httpx.BaseTransport):
    """
    An HTTPX Transport that applies stale-while-revalidate on top of a caching transport.

    :param transport: Caching `Transport` that our class wraps; it must answer `only-if-cached`
        requests it cannot satisfy with a 504 response
    :type transport: httpx.BaseTransport
    :param controller: Controller that classifies cached responses, defaults to None
    :type controller: tp.Optional[SWRController], optional
    :param dispatcher: Dispatcher that runs revalidations of stale responses, defaults to None
    :type dispatcher: tp.Optional[BaseDispatcher], optional
    :param diagnostic_logger: Logger that receives cache probe failures, defaults to None
    :type diagnostic_logger: tp.Optional[logging.Logger], optional
    """

    def __init__(
        self,
        transport: httpx.BaseTransport,
        controller: tp.Optional[SWRController] = None,
        dispatcher: tp.Optional[BaseDispatcher] = None,
        diagnostic_logger: tp.Optional[logging.Logger] = None,
    ) -> None:
        self._transport = transport
        self._controller = controller if controller is not None else SWRController()
        self._dispatcher = dispatcher if dispatcher is not None else InlineDispatcher()
        self._diagnostic_logger = diagnostic_logger if diagnostic_logger is not None else logger

    def handle_request(self, request: Request) -> Response:
        """
        Serves the request from the cache, from the cache while revalidating, or from the network.

        :param request: An HTTP request
        :type request: httpx.Request
        :return: An HTTP response
        :rtype: httpx.Response
        """

        if self._controller.is_bypassed(request):
            return self._transport.handle_request(request)

        # The cache-only, network and fallback requests all send this body.
        request.read()

        cached_response = self._probe_cache(request)

        if cached_response is None:
            return self._transport.handle_request(request)

        state = self._controller.classify(request, cached_response)

        if state is SWRState.FRESH:
            cached_response.extensions["swr_state"] = state.value
            return cached_response

        if state is SWRState.STALE:
            self._dispatcher.submit(partial(self._revalidate, self._controller.make_network_request(request)))
            cached_response.extensions["swr_state"] = state.value
            return cached_response

        cached_response.close()
        response = self._transport.handle_request(self._controller.make_network_request(request))
        response.extensions["swr_state"] = state.value
        return response

    def _probe_cache(self, request: Request) -> tp.Optional[Response]:
        cache_request = self._controller.make_cache_only_request(request)

        try:
            response = self._transport.handle_request(cache_request)
        except httpx.TransportError as exc:
            # We can still fall back to the network and hopefully repopulate the cache.
            self._diagnostic_logger.debug(
                f"Could not probe the cache for the resource located at {get_safe_url(request.url)}: {exc!r}"
            )
            return None

        if self._controller.is_cache_miss(response):
            logger.debug(f"The resource located at {get_safe_url(request.url)} is not in the cache.")
            response.close()
            return None
        return response

    def _revalidate(self, request: Request) -> None:
        logger.debug(f"Revalidating the resource located at {get_safe_url(request.url)}.")
        response = self._transport.handle_request(request)
        try:
            response.read()
        finally:
            response.close()

    def close(self) -> None:
        self._dispatcher.close()
        self._transport.close()

    def __enter__(self) -> "Self":
        self._dispatcher.__enter__()
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()
