import datetime
import logging
import typing as tp

import httpx

from ._headers import parse_cache_control_leniently, parse_stale_while_revalidate
from ._models import SWRState, SWRWindow
from ._utils import BaseClock, Clock, get_safe_url, parse_date

logger = logging.getLogger("swrcache.controller")

# Status the wrapped cache answers with when `only-if-cached` cannot be satisfied.
CACHE_MISS_STATUS_CODE = 504
FORCE_NETWORK = "no-cache"
MAX_STALE = 2_147_483_647

__all__ = (
    "SWRController",
    "extract_swr_seconds",
    "get_max_age",
    "get_received_at",
)


def with_cache_control(request: httpx.Request, cache_control: str) -> httpx.Request:
    headers = request.headers.copy()
    # Replaces every existing Cache-Control field, whatever its casing.
    headers["Cache-Control"] = cache_control
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=headers,
        stream=request.stream,
        extensions=dict(request.extensions),
    )


def get_received_at(response: httpx.Response) -> int:
    cache_metadata = response.extensions.get("cache_metadata")
    if cache_metadata and isinstance(cache_metadata.get("created_at"), datetime.datetime):
        return int(cache_metadata["created_at"].timestamp())

    created_at = response.extensions.get("hishel_created_at")
    if created_at is not None:
        return int(created_at)

    date = response.headers.get("date")
    if date is not None:
        timestamp = parse_date(date)
        if timestamp is not None:
            return timestamp

    # Unknown reception time, so the response can only be treated as expired.
    return 0


def get_max_age(response: httpx.Response) -> int:
    response_cache_control = parse_cache_control_leniently(response.headers.get_list("cache-control"))

    if response_cache_control.max_age is None:
        return 0
    return max(0, response_cache_control.max_age)


def extract_swr_seconds(response: httpx.Response) -> int:
    return parse_stale_while_revalidate(", ".join(response.headers.get_list("cache-control")))


class SWRController:
    """
    Decides how a cached response relates to its stale-while-revalidate window.

    :param clock: Source of the current time in epoch seconds, defaults to `Clock()`
    :type clock: tp.Optional[BaseClock], optional
    :param max_stale: `max-stale` sent with the cache-only probe so that the wrapped
        cache hands out stale responses too, defaults to `MAX_STALE`
    :type max_stale: int, optional
    """

    def __init__(
        self,
        clock: tp.Optional[BaseClock] = None,
        max_stale: int = MAX_STALE,
    ) -> None:
        self._clock = clock if clock else Clock()
        self._max_stale = max_stale

    def is_bypassed(self, request: httpx.Request) -> bool:
        """
        Checks whether the request has already decided about freshness itself.

        Requests with `no-cache` or `only-if-cached` are left to the wrapped
        transport, as are requests with the `swr_disabled` extension.
        Directives that cannot be understood are skipped.
        """
        if request.extensions.get("swr_disabled", False):
            logger.debug(
                (
                    f"Skipping stale-while-revalidate for the resource located at {get_safe_url(request.url)} "
                    "since the request disables it."
                )
            )
            return True

        request_cache_control = parse_cache_control_leniently(request.headers.get_list("cache-control"))

        if request_cache_control.no_cache or request_cache_control.only_if_cached:
            logger.debug(
                (
                    f"Skipping stale-while-revalidate for the resource located at {get_safe_url(request.url)} "
                    "since the request contains the no-cache or only-if-cached directive."
                )
            )
            return True
        return False

    def make_cache_only_request(self, request: httpx.Request) -> httpx.Request:
        return with_cache_control(request, f"only-if-cached, max-stale={self._max_stale}")

    def make_network_request(self, request: httpx.Request) -> httpx.Request:
        return with_cache_control(request, FORCE_NETWORK)

    def is_cache_miss(self, response: httpx.Response) -> bool:
        return response.status_code == CACHE_MISS_STATUS_CODE

    def get_window(self, response: httpx.Response) -> SWRWindow:
        return SWRWindow.from_values(
            received_at=get_received_at(response),
            max_age=get_max_age(response),
            swr_seconds=extract_swr_seconds(response),
        )

    def classify(self, request: httpx.Request, response: httpx.Response) -> SWRState:
        window = self.get_window(response)
        now = self._clock.now()
        state = window.classify(now)

        logger.debug(
            (
                f"Considering the cached resource located at {get_safe_url(request.url)} "
                f"as {state.value} (now={now}, fresh until {window.fresh_until}, "
                f"stale until {window.stale_until})."
            )
        )
        return state
