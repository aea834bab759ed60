from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit


class HTTPMethod(str, Enum):
    """Supported HTTP verbs."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def carries_body(self) -> bool:
        return self in (HTTPMethod.POST, HTTPMethod.PUT)


# Request/Response Models
@dataclass(frozen=True)
class HTTPRequest:
    """Represents an HTTP request. Header lookups are case-insensitive."""
    method: HTTPMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: float = 30.0

    def __post_init__(self):
        object.__setattr__(self, 'method', HTTPMethod(self.method))
        object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

    @property
    def parsed_url(self):
        return urlsplit(self.url)

    def header(self, name: str) -> Optional[str]:
        """Return the value of header `name`, ignoring case."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def with_header(self, name: str, value: str) -> 'HTTPRequest':
        """Return a copy with `name` set, replacing any header of the same name."""
        return replace(self, headers=set_header(self.headers, name, value))


@dataclass
class HTTPResponse:
    """Represents an HTTP response."""
    status_code: int
    headers: Dict[str, str]
    body: bytes
    request: Optional[HTTPRequest] = None
    elapsed: float = 0.0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


@dataclass
class ErrorResponseBody:
    """Error envelope some servers return alongside a failing status."""
    code: int
    message: str


def set_header(headers: Mapping[str, str], name: str, value: str) -> Dict[str, str]:
    """Copy `headers` with `name` set; existing keys matching case-insensitively are dropped."""
    lowered = name.lower()
    updated = {key: val for key, val in headers.items() if key.lower() != lowered}
    updated[name] = value
    return updated
