import typing as tp

import httpx

__all__ = ("MockAsyncTransport",)


class MockAsyncTransport(httpx.AsyncBaseTransport):
    """
    Replays queued responses in order and records every request it receives.

    Queued exceptions are raised instead of being returned.
    """

    def __init__(self) -> None:
        self.mocked_responses: tp.List[tp.Union[httpx.Response, Exception]] = []
        self.requests: tp.List[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.mocked_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def add_responses(self, responses: tp.List[tp.Union[httpx.Response, Exception]]) -> None:
        self.mocked_responses.extend(responses)
