"""NetConnect - A JSON-over-HTTP client with pluggable transports."""

# Import key classes for easier access
from .top import AsyncNetworkClient, SyncNetworkClient, check_ok_status
from .base import BaseTransport, HTTPConnectionTransport
from .middlewares import TransportDecorator, LoggingTransport, DefaultHeadersTransport
from .models import HTTPMethod, HTTPRequest, HTTPResponse, ErrorResponseBody
from .codec import JSONEncoder, JSONDecoder, KeyEncodingStrategy, KeyDecodingStrategy
from .config import ClientConfig
from .client_factory import ClientFactory, create_async_client, create_sync_client
from .utils import build_url, build_request
from .exceptions import *

__version__ = "0.1.0"
