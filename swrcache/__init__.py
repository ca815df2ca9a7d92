from ._async._client import AsyncSWRClient
from ._async._mock import MockAsyncTransport
from ._async._transports import AsyncSWRTransport
from ._controller import SWRController, extract_swr_seconds, get_max_age, get_received_at
from ._dispatchers import (
    AsyncBackgroundDispatcher,
    AsyncBaseDispatcher,
    AsyncInlineDispatcher,
    BackgroundDispatcher,
    BaseDispatcher,
    InlineDispatcher,
)
from ._exceptions import CacheControlError, ParseError, ValidationError
from ._headers import CacheControl, parse_cache_control, parse_stale_while_revalidate
from ._models import SWRState, SWRWindow
from ._sync._client import SWRClient
from ._sync._mock import MockTransport
from ._sync._transports import SWRTransport
from ._utils import BaseClock, Clock

__all__ = (
    # Transports
    "AsyncSWRTransport",
    "SWRTransport",
    # Clients
    "AsyncSWRClient",
    "SWRClient",
    # Mocks
    "MockAsyncTransport",
    "MockTransport",
    # Controller
    "SWRController",
    "SWRState",
    "SWRWindow",
    "extract_swr_seconds",
    "get_max_age",
    "get_received_at",
    # Dispatchers
    "BaseDispatcher",
    "InlineDispatcher",
    "BackgroundDispatcher",
    "AsyncBaseDispatcher",
    "AsyncInlineDispatcher",
    "AsyncBackgroundDispatcher",
    # Headers
    "CacheControl",
    "parse_cache_control",
    "parse_stale_while_revalidate",
    # Clocks
    "BaseClock",
    "Clock",
    # Exceptions
    "CacheControlError",
    "ParseError",
    "ValidationError",
)

__version__ = "0.1.0"
