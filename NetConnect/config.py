""" Client configuration """

from dataclasses import dataclass, field
from typing import Optional

from .base import BaseTransport, HTTPConnectionTransport
from .codec import JSONDecoder, JSONEncoder, KeyDecodingStrategy, KeyEncodingStrategy

DEFAULT_TIMEOUT = 30.0


def default_encoder() -> JSONEncoder:
    """Encoder writing snake_case keys."""
    return JSONEncoder(key_encoding_strategy=KeyEncodingStrategy.CONVERT_TO_SNAKE_CASE)


def default_decoder() -> JSONDecoder:
    """Decoder reading snake_case keys into camelCase fields."""
    return JSONDecoder(key_decoding_strategy=KeyDecodingStrategy.CONVERT_FROM_SNAKE_CASE)


@dataclass(frozen=True)
class ClientConfig:
    """Everything a client needs: codec, transport and per-request defaults."""
    encoder: JSONEncoder = field(default_factory=default_encoder)
    decoder: JSONDecoder = field(default_factory=default_decoder)
    transport: Optional[BaseTransport] = None
    optional_decode: bool = True
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

    def make_transport(self) -> BaseTransport:
        """Return the configured transport, or a fresh http.client one."""
        return self.transport or HTTPConnectionTransport()
