"""
JSON-over-HTTP client built on an injectable transport.
AsyncNetworkClient does the work; SyncNetworkClient drives it for callers without an event loop.
"""

import asyncio
import concurrent.futures
from typing import Any, Mapping, Optional, Type, TypeVar

from .base import BaseTransport
from .codec import JSONDecoder, accepts_none
from .config import ClientConfig
from .exceptions import BadResponseCode, BadResponseCodeAndError, DecodingError, NoDataError, TransportCastError
from .models import ErrorResponseBody, HTTPMethod, HTTPResponse
from .utils import build_request, build_url

T = TypeVar('T')

# Error bodies are read as-is, without key conversion
_error_decoder = JSONDecoder()


# Response Classification
def ensure_http_response(response: Any) -> HTTPResponse:
    """Reject transport results that aren't a well-formed HTTPResponse."""
    if not isinstance(response, HTTPResponse):
        raise TransportCastError(f"Transport returned {type(response).__name__}, expected HTTPResponse")
    if isinstance(response.status_code, bool) or not isinstance(response.status_code, int):
        raise TransportCastError(f"Response status code {response.status_code!r} is not an integer")
    if not isinstance(response.body, (bytes, bytearray)):
        raise TransportCastError(f"Response body is {type(response.body).__name__}, expected bytes")
    return response


def check_ok_status(response: HTTPResponse) -> None:
    """
    Pass 2xx responses through, raise for anything else.
    A body shaped like {"code": int, "message": str} becomes BadResponseCodeAndError carrying the server's
    own code and message; any other body falls back to BadResponseCode with the HTTP status.
    """
    if response.is_success:
        return
    try:
        error_body = _error_decoder.decode(ErrorResponseBody, response.body)
    except DecodingError:
        raise BadResponseCode(response.status_code, headers=response.headers, body=response.body) from None
    raise BadResponseCodeAndError(
        error_body.code,
        error_body.message,
        status_code=response.status_code,
        headers=response.headers,
        body=response.body
    )


# Asynchronous Client
class AsyncNetworkClient:
    """Asynchronous JSON client. Holds no per-call state, so one instance can serve concurrent calls."""

    def __init__(self, config: Optional[ClientConfig] = None, owns_transport: Optional[bool] = None):
        self.config = config or ClientConfig()
        self._transport: BaseTransport = self.config.make_transport()
        # By default only close what we created
        self._owns_transport = self.config.transport is None if owns_transport is None else owns_transport

    async def get(self, url: str, response_type: Type[T],
                  headers: Optional[Mapping[str, str]] = None,
                  query_parameters: Optional[Mapping[str, str]] = None) -> T:
        """Send a GET request and decode the response into `response_type`."""
        return await self.request(HTTPMethod.GET, url, response_type,
                                  headers=headers, query_parameters=query_parameters)

    async def post(self, url: str, response_type: Type[T], body: Any = None,
                   headers: Optional[Mapping[str, str]] = None,
                   query_parameters: Optional[Mapping[str, str]] = None) -> T:
        """Send a POST request. Leave `body` as None to send no body."""
        return await self.request(HTTPMethod.POST, url, response_type, body=body,
                                  headers=headers, query_parameters=query_parameters)

    async def put(self, url: str, response_type: Type[T], body: Any,
                  headers: Optional[Mapping[str, str]] = None,
                  query_parameters: Optional[Mapping[str, str]] = None) -> T:
        """Send a PUT request with `body` encoded as JSON."""
        return await self.request(HTTPMethod.PUT, url, response_type, body=body,
                                  headers=headers, query_parameters=query_parameters)

    async def delete(self, url: str, response_type: Type[T],
                     headers: Optional[Mapping[str, str]] = None,
                     query_parameters: Optional[Mapping[str, str]] = None) -> T:
        """Send a DELETE request and decode the response into `response_type`."""
        return await self.request(HTTPMethod.DELETE, url, response_type,
                                  headers=headers, query_parameters=query_parameters)

    async def request(self, method: HTTPMethod, url: str, response_type: Optional[Type[T]],
                      body: Any = None,
                      headers: Optional[Mapping[str, str]] = None,
                      query_parameters: Optional[Mapping[str, str]] = None) -> T:
        """
        Run one request through the pipeline:
        build URL -> encode body -> build request -> send -> check status -> decode.
        The first failure is raised; nothing is retried.
        """
        target = build_url(url, query_parameters)
        encoded_body = self.config.encoder.encode(body) if body is not None else None
        request = build_request(method, target, headers=headers, body=encoded_body,
                                timeout=self.config.timeout)

        response = ensure_http_response(await self._transport.send(request))
        check_ok_status(response)
        return self._decode(response_type, response.body)

    def _decode(self, response_type, body: bytes):
        if response_type is None or response_type is type(None):
            return None
        if not self.config.optional_decode:
            return self.config.decoder.decode(response_type, body)

        value = self.config.decoder.decode_optional(response_type, body)
        # Optional response types get None back rather than NoDataError
        if value is None and not accepts_none(response_type):
            raise NoDataError(f"Response had no {getattr(response_type, '__name__', response_type)} value")
        return value

    async def close(self):
        """Close the client and its transport, if the client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


# Synchronous Client
class SyncNetworkClient:
    """Blocking facade over AsyncNetworkClient."""

    def __init__(self, config: Optional[ClientConfig] = None, owns_transport: Optional[bool] = None):
        self._client = AsyncNetworkClient(config, owns_transport)

    @property
    def config(self) -> ClientConfig:
        return self._client.config

    def get(self, url: str, response_type: Type[T],
            headers: Optional[Mapping[str, str]] = None,
            query_parameters: Optional[Mapping[str, str]] = None) -> T:
        return self._run_async(self._client.get(url, response_type, headers, query_parameters))

    def post(self, url: str, response_type: Type[T], body: Any = None,
             headers: Optional[Mapping[str, str]] = None,
             query_parameters: Optional[Mapping[str, str]] = None) -> T:
        return self._run_async(self._client.post(url, response_type, body, headers, query_parameters))

    def put(self, url: str, response_type: Type[T], body: Any,
            headers: Optional[Mapping[str, str]] = None,
            query_parameters: Optional[Mapping[str, str]] = None) -> T:
        return self._run_async(self._client.put(url, response_type, body, headers, query_parameters))

    def delete(self, url: str, response_type: Type[T],
               headers: Optional[Mapping[str, str]] = None,
               query_parameters: Optional[Mapping[str, str]] = None) -> T:
        return self._run_async(self._client.delete(url, response_type, headers, query_parameters))

    def _run_async(self, coro):
        """Run an async coroutine in sync context."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running, we can use asyncio.run
            return asyncio.run(coro)
        # Already inside an event loop: run on a fresh loop in a worker thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, coro).result()

    def close(self):
        """Close the client and its transport, if the client created it."""
        self._run_async(self._client.close())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
