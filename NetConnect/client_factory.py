""" Client Factory: assembles the transport stack and reads environment defaults """

import os
from typing import Optional

from .base import BaseTransport, HTTPConnectionTransport
from .config import ClientConfig
from .middlewares import DefaultHeadersTransport, LoggingTransport
from .top import AsyncNetworkClient, SyncNetworkClient

DEFAULT_USER_AGENT = "NetConnect/0.1.0"

TIMEOUT_ENV_VAR = "NETCONNECT_TIMEOUT"
USER_AGENT_ENV_VAR = "NETCONNECT_USER_AGENT"
LOG_REQUESTS_ENV_VAR = "NETCONNECT_LOG_REQUESTS"
OPTIONAL_DECODE_ENV_VAR = "NETCONNECT_OPTIONAL_DECODE"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def env_flag(name: str) -> Optional[bool]:
    """Read a boolean environment variable; None when unset."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def config_from_env(**overrides) -> ClientConfig:
    """Build a ClientConfig from NETCONNECT_* environment variables; keyword arguments win."""
    values = {}
    timeout = os.getenv(TIMEOUT_ENV_VAR)
    if timeout:
        try:
            values['timeout'] = float(timeout)
        except ValueError:
            raise ValueError(f"{TIMEOUT_ENV_VAR} must be a number, got {timeout!r}")
    optional_decode = env_flag(OPTIONAL_DECODE_ENV_VAR)
    if optional_decode is not None:
        values['optional_decode'] = optional_decode
    values.update(overrides)
    return ClientConfig(**values)


class ClientFactory:
    """Factory class for creating clients from environment defaults."""

    @staticmethod
    def build_transport(
        transport: Optional[BaseTransport] = None,
        user_agent: Optional[str] = None,
        log_requests: Optional[bool] = None
    ) -> BaseTransport:
        """
        Wrap `transport` (http.client by default) with a User-Agent default and, if enabled, request logging.
        Unset arguments fall back to NETCONNECT_USER_AGENT and NETCONNECT_LOG_REQUESTS.
        """
        user_agent = user_agent or os.getenv(USER_AGENT_ENV_VAR) or DEFAULT_USER_AGENT
        if log_requests is None:
            log_requests = bool(env_flag(LOG_REQUESTS_ENV_VAR))

        stack = DefaultHeadersTransport(transport or HTTPConnectionTransport(), {'User-Agent': user_agent})
        if log_requests:
            stack = LoggingTransport(stack)
        return stack

    @staticmethod
    def create_config(
        transport: Optional[BaseTransport] = None,
        user_agent: Optional[str] = None,
        log_requests: Optional[bool] = None,
        **kwargs
    ) -> ClientConfig:
        """Create a ClientConfig; remaining keyword arguments override ClientConfig fields."""
        return config_from_env(
            transport=ClientFactory.build_transport(transport, user_agent, log_requests),
            **kwargs
        )

    @staticmethod
    def create_async_client(transport: Optional[BaseTransport] = None, **kwargs) -> AsyncNetworkClient:
        """Create an asynchronous client. It closes the transport stack only if it built the innermost transport."""
        config = ClientFactory.create_config(transport=transport, **kwargs)
        return AsyncNetworkClient(config, owns_transport=transport is None)

    @staticmethod
    def create_sync_client(transport: Optional[BaseTransport] = None, **kwargs) -> SyncNetworkClient:
        """Create a synchronous client."""
        config = ClientFactory.create_config(transport=transport, **kwargs)
        return SyncNetworkClient(config, owns_transport=transport is None)


def create_async_client(**kwargs) -> AsyncNetworkClient:
    """Create an asynchronous client (see ClientFactory.create_config for options)."""
    return ClientFactory.create_async_client(**kwargs)


def create_sync_client(**kwargs) -> SyncNetworkClient:
    """Create a synchronous client (see ClientFactory.create_config for options)."""
    return ClientFactory.create_sync_client(**kwargs)
