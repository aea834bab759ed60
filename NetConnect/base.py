import asyncio, time, ssl, socket, http.client

from typing import Dict, Tuple

from .exceptions import ConnectionError, TimeoutError, TransportError
from .models import HTTPRequest, HTTPResponse


# Transport Abstraction
class BaseTransport:
    """
    The boundary that performs network I/O.
    A transport takes a built HTTPRequest and returns the raw HTTPResponse, whatever the status code.
    It never interprets the status or the body; that's the client's job.
    Swap it for a stub in tests, or wrap it with the decorators in `middlewares`.
    """

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        raise NotImplementedError

    async def close(self):
        """Release any resources held by the transport."""
        pass


# Standard library transport
class HTTPConnectionTransport(BaseTransport):
    """Transport built on http.client. Opens one connection per request and runs it in the default executor."""

    def __init__(self, ssl_context: ssl.SSLContext = None):
        self.ssl_context = ssl_context
        self._closed = False

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        if self._closed:
            raise RuntimeError("Transport is closed")

        start_time = time.time()
        loop = asyncio.get_running_loop()
        status_code, headers, body = await loop.run_in_executor(None, self._sync_request, request)

        return HTTPResponse(
            status_code=status_code,
            headers=headers,
            body=body,
            request=request,
            elapsed=time.time() - start_time
        )

    def _create_connection(self, parsed_url, timeout: float) -> http.client.HTTPConnection:
        """Create a new connection for the given URL."""
        if parsed_url.scheme == 'https':
            return http.client.HTTPSConnection(
                parsed_url.hostname,
                parsed_url.port,
                timeout=timeout,
                context=self.ssl_context or ssl.create_default_context()
            )
        if parsed_url.scheme == 'http':
            return http.client.HTTPConnection(parsed_url.hostname, parsed_url.port, timeout=timeout)
        raise TransportError(f"Unsupported URL scheme: {parsed_url.scheme!r}")

    def _sync_request(self, request: HTTPRequest) -> Tuple[int, Dict[str, str], bytes]:
        """Execute a blocking HTTP request."""
        parsed_url = request.parsed_url
        path = parsed_url.path or '/'
        if parsed_url.query:
            path += '?' + parsed_url.query

        conn = None
        try:
            conn = self._create_connection(parsed_url, request.timeout)
            conn.request(request.method.value, path, body=request.body, headers=dict(request.headers))
            response = conn.getresponse()
            body = response.read()
            return response.status, dict(response.headers), body

        except socket.timeout as e:
            raise TimeoutError(f"Request timed out after {request.timeout} seconds") from e
        except (UnicodeEncodeError, http.client.InvalidURL) as e:
            # http.client only sends ASCII request lines and latin-1 headers
            raise TransportError(f"Cannot send request to {request.url!r}: {e}") from e
        except (OSError, http.client.HTTPException) as e:
            raise ConnectionError(f"Connection error: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    async def close(self):
        self._closed = True
