import logging
from typing import Mapping, Optional

from .base import BaseTransport
from .models import HTTPRequest, HTTPResponse

# Transport Decorators
class TransportDecorator(BaseTransport):
    """Base class for transports that wrap another transport and delegate to it."""

    def __init__(self, inner: BaseTransport):
        self.inner = inner

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        return await self.inner.send(request)

    async def close(self):
        await self.inner.close()

class LoggingTransport(TransportDecorator):
    """Logs every request, its response status and any failure, then delegates."""

    def __init__(self, inner: BaseTransport, logger: Optional[logging.Logger] = None):
        super().__init__(inner)
        self.logger = logger or logging.getLogger(__name__)

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        self.logger.debug(f"Request: {request.method.value} {request.url}")
        try:
            response = await self.inner.send(request)
        except Exception as error:
            self.logger.error(f"Request failed: {request.method.value} {request.url} - {error}")
            raise
        if isinstance(response, HTTPResponse):
            self.logger.debug(f"Response: {response.status_code} ({response.elapsed:.3f}s)")
        else:
            self.logger.debug(f"Response: unexpected {type(response).__name__}")
        return response

class DefaultHeadersTransport(TransportDecorator):
    """Adds headers (e.g. User-Agent) the request doesn't already carry."""

    def __init__(self, inner: BaseTransport, headers: Mapping[str, str]):
        super().__init__(inner)
        self.headers = dict(headers)

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        for name, value in self.headers.items():
            if request.header(name) is None:
                request = request.with_header(name, value)
        return await self.inner.send(request)
