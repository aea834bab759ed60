from typing import Dict, Optional

# Exceptions
class NetworkClientError(Exception):
    """Base exception for everything the client raises."""
    pass

class InvalidURLError(NetworkClientError):
    """Raised when the base URL string cannot be parsed."""
    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"Invalid URL: {url!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.url = url
        self.reason = reason

class BadResponseError(NetworkClientError):
    """Base exception for responses outside the 2xx range."""
    def __init__(self, message: str, status_code: int,
                 headers: Optional[Dict[str, str]] = None, body: Optional[bytes] = None):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers or {}
        self.body = body

class BadResponseCodeAndError(BadResponseError):
    """The server failed and described why with a `{"code", "message"}` body.

    `code` and `message` are the values the server put in the body; the
    transport-level status is kept in `status_code`.
    """
    def __init__(self, code: int, message: str, status_code: int,
                 headers: Optional[Dict[str, str]] = None, body: Optional[bytes] = None):
        super().__init__(f"Bad response {code}: {message}", status_code, headers, body)
        self.code = code
        self.message = message

class BadResponseCode(BadResponseError):
    """The server failed without a recognizable error body."""
    def __init__(self, status_code: int,
                 headers: Optional[Dict[str, str]] = None, body: Optional[bytes] = None):
        super().__init__(f"Bad response code: {status_code}", status_code, headers, body)

class TransportCastError(NetworkClientError):
    """Raised when a transport hands back something that is not a well-formed HTTPResponse."""
    pass

class NoDataError(NetworkClientError):
    """Raised when the response carried no value where one was expected."""
    pass

class TransportError(NetworkClientError):
    """Base class for failures while talking to the server."""
    pass

class TimeoutError(TransportError):
    """Raised when request times out."""
    pass

class ConnectionError(TransportError):
    """Raised when connection fails."""
    pass

class CodecError(NetworkClientError):
    """Base class for JSON encoding and decoding failures."""
    pass

class EncodingError(CodecError):
    """Raised when a value cannot be serialized to JSON."""
    pass

class DecodingError(CodecError):
    """Raised when a payload cannot be decoded into the requested type."""
    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{message} at {path}")
        self.path = path
