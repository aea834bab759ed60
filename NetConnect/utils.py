import re
from typing import Mapping, Optional
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from .exceptions import InvalidURLError
from .models import HTTPMethod, HTTPRequest, set_header

JSON_CONTENT_TYPE = "application/json"

_WHITESPACE_OR_CONTROL = re.compile(r'[\s\x00-\x1f\x7f]')
_ACRONYM_BOUNDARY = re.compile(r'([A-Z]+)([A-Z][a-z])')
_WORD_BOUNDARY = re.compile(r'([a-z0-9])([A-Z])')


def _split_underscores(key: str):
  # Leading and trailing underscores survive both conversions untouched
  core = key.strip('_')
  if not core:
      return key, '', ''
  start = key.index(core)
  return key[:start], core, key[start + len(core):]


def to_snake_case(key: str) -> str:
  """`someField` -> `some_field`, `myURLValue` -> `my_url_value`."""
  leading, core, trailing = _split_underscores(key)
  if not core:
      return key
  core = _ACRONYM_BOUNDARY.sub(r'\1_\2', core)
  core = _WORD_BOUNDARY.sub(r'\1_\2', core)
  return leading + core.lower() + trailing


def from_snake_case(key: str) -> str:
  """`some_field` -> `someField`. Keys without inner underscores are returned as-is."""
  leading, core, trailing = _split_underscores(key)
  if '_' not in core:
      return key
  words = [word for word in core.split('_') if word]
  converted = words[0] + ''.join(word.capitalize() for word in words[1:])
  return leading + converted + trailing


def build_url(base: str, query_parameters: Optional[Mapping[str, str]] = None) -> str:
  """Validate `base` and apply `query_parameters` to it.

  A non-empty mapping replaces the base's whole query string, keeping the
  mapping's iteration order. Without parameters the base is returned untouched.
  """
  if not isinstance(base, str) or not base:
      raise InvalidURLError(base, "empty")
  if _WHITESPACE_OR_CONTROL.search(base):
      raise InvalidURLError(base, "contains whitespace or control characters")
  try:
      parts = urlsplit(base)
      parts.port  # raises ValueError on a malformed port
  except ValueError as e:
      raise InvalidURLError(base, str(e)) from e
  if not parts.scheme or not parts.netloc or not parts.hostname:
      raise InvalidURLError(base, "missing scheme or host")

  if not query_parameters:
      return base

  query = urlencode(list(query_parameters.items()), quote_via=quote)
  return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def build_request(method: HTTPMethod, url: str,
                  headers: Optional[Mapping[str, str]] = None,
                  body: Optional[bytes] = None,
                  timeout: float = 30.0) -> HTTPRequest:
  """Assemble a transport-ready request.

  POST and PUT get `Content-Type: application/json` before the caller's
  headers are applied, so a caller header of the same name wins.
  GET and DELETE never carry a body.
  """
  method = HTTPMethod(method)
  request_headers = {}
  if method.carries_body:
      request_headers['Content-Type'] = JSON_CONTENT_TYPE
  for name, value in (headers or {}).items():
      request_headers = set_header(request_headers, name, value)

  return HTTPRequest(
      method=method,
      url=url,
      headers=request_headers,
      body=body if method.carries_body else None,
      timeout=timeout
  )
