"""JSON encoding and decoding with snake_case / camelCase key translation."""

import dataclasses
import json
import types
import typing
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from .exceptions import DecodingError, EncodingError
from .utils import from_snake_case, to_snake_case

T = TypeVar('T')

_MISSING = object()
_NoneType = type(None)


class KeyEncodingStrategy(Enum):
    """How in-memory field names are written to the wire."""
    USE_DEFAULT_KEYS = "use_default_keys"
    CONVERT_TO_SNAKE_CASE = "convert_to_snake_case"

    def convert(self, key: str) -> str:
        if self is KeyEncodingStrategy.CONVERT_TO_SNAKE_CASE:
            return to_snake_case(key)
        return key


class KeyDecodingStrategy(Enum):
    """How wire keys are mapped back to in-memory field names."""
    USE_DEFAULT_KEYS = "use_default_keys"
    CONVERT_FROM_SNAKE_CASE = "convert_from_snake_case"

    def convert(self, key: str) -> str:
        if self is KeyDecodingStrategy.CONVERT_FROM_SNAKE_CASE:
            return from_snake_case(key)
        return key


class JSONEncoder:
    """Serializes dataclasses, mappings, sequences and scalars to JSON bytes.

    Dataclass fields holding None are left out of the payload unless
    `skip_none_fields` is False.
    """

    def __init__(self, key_encoding_strategy: KeyEncodingStrategy = KeyEncodingStrategy.USE_DEFAULT_KEYS,
                 skip_none_fields: bool = True):
        self.key_encoding_strategy = key_encoding_strategy
        self.skip_none_fields = skip_none_fields

    def encode(self, value: Any) -> bytes:
        payload = self._to_jsonable(value, "$")
        try:
            return json.dumps(payload, allow_nan=False, ensure_ascii=False).encode('utf-8')
        except ValueError as e:
            raise EncodingError(f"Cannot encode value: {e}") from e

    def _to_jsonable(self, value: Any, path: str) -> Any:
        if isinstance(value, Enum):
            return self._to_jsonable(value.value, path)
        if value is None or isinstance(value, (bool, int, str)):
            return value
        if isinstance(value, float):
            if value != value or value in (float('inf'), float('-inf')):
                raise EncodingError(f"Non-finite float {value!r} at {path}")
            return value
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            encoded = {}
            for f in dataclasses.fields(value):
                item = getattr(value, f.name)
                if item is None and self.skip_none_fields:
                    continue
                encoded[self.key_encoding_strategy.convert(f.name)] = self._to_jsonable(item, f"{path}.{f.name}")
            return encoded
        if isinstance(value, Mapping):
            encoded = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodingError(f"Mapping key {key!r} at {path} is not a string")
                encoded[self.key_encoding_strategy.convert(key)] = self._to_jsonable(item, f"{path}.{key}")
            return encoded
        if isinstance(value, (list, tuple)):
            return [self._to_jsonable(item, f"{path}[{i}]") for i, item in enumerate(value)]
        raise EncodingError(f"Cannot encode value of type {type(value).__name__} at {path}")


class JSONDecoder:
    """Decodes JSON bytes into a requested type.

    Supported targets: Any, None, bool, int, float, str, Enum subclasses,
    dataclasses, list[T], tuple[...], dict[str, T], Optional[T] and Union[...].
    Wire keys go through `key_decoding_strategy` before being matched to
    dataclass field names.
    """

    def __init__(self, key_decoding_strategy: KeyDecodingStrategy = KeyDecodingStrategy.USE_DEFAULT_KEYS):
        self.key_decoding_strategy = key_decoding_strategy

    def decode(self, target: Type[T], data: bytes) -> T:
        try:
            raw = json.loads(data)
        except (ValueError, TypeError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise DecodingError(f"Invalid JSON: {e}") from e
        return self._decode_value(target, self._convert_keys(raw), "$")

    def decode_optional(self, target: Type[T], data: bytes) -> Optional[T]:
        """Like `decode`, but any failure or a JSON null yields None."""
        try:
            return self.decode(target, data)
        except DecodingError:
            return None

    def _convert_keys(self, raw: Any) -> Any:
        if isinstance(raw, dict):
            return {self.key_decoding_strategy.convert(key): self._convert_keys(value)
                    for key, value in raw.items()}
        if isinstance(raw, list):
            return [self._convert_keys(item) for item in raw]
        return raw

    def _decode_value(self, target: Any, value: Any, path: str) -> Any:
        if target is Any or target is object:
            return value
        if target is None or target is _NoneType:
            if value is not None:
                raise DecodingError(f"Expected null, got {type(value).__name__}", path)
            return None

        if _is_union(target):
            return self._decode_union(typing.get_args(target), value, path)
        origin = typing.get_origin(target)

        if value is None:
            raise DecodingError(f"Expected {_type_name(target)}, got null", path)

        if origin in (list, typing.List):
            return self._decode_list(typing.get_args(target), value, path)
        if origin in (tuple, typing.Tuple):
            return self._decode_tuple(typing.get_args(target), value, path)
        if origin in (dict, typing.Dict):
            return self._decode_dict(typing.get_args(target), value, path)

        if isinstance(target, type):
            if issubclass(target, Enum):
                try:
                    return target(value)
                except (ValueError, TypeError) as e:
                    raise DecodingError(f"{value!r} is not a valid {target.__name__}", path) from e
            if dataclasses.is_dataclass(target):
                return self._decode_dataclass(target, value, path)
            if target is bool:
                return self._expect(value, bool, path)
            if target is int:
                if isinstance(value, bool):
                    raise DecodingError("Expected int, got bool", path)
                return self._expect(value, int, path)
            if target is float:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise DecodingError(f"Expected float, got {type(value).__name__}", path)
                return float(value)
            if target in (str, list, dict):
                return self._expect(value, target, path)

        raise DecodingError(f"Unsupported target type {_type_name(target)}", path)

    def _decode_union(self, arms, value, path):
        if value is None:
            if _NoneType in arms:
                return None
            raise DecodingError("Expected a value, got null", path)
        last_error = None
        for arm in arms:
            if arm is _NoneType:
                continue
            try:
                return self._decode_value(arm, value, path)
            except DecodingError as e:
                last_error = e
        raise last_error or DecodingError("No union member matched", path)

    def _decode_list(self, args, value, path):
        self._expect(value, list, path)
        item_type = args[0] if args else Any
        return [self._decode_value(item_type, item, f"{path}[{i}]") for i, item in enumerate(value)]

    def _decode_tuple(self, args, value, path):
        self._expect(value, list, path)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_type = args[0] if args else Any
            return tuple(self._decode_value(item_type, item, f"{path}[{i}]") for i, item in enumerate(value))
        if len(args) != len(value):
            raise DecodingError(f"Expected {len(args)} items, got {len(value)}", path)
        return tuple(self._decode_value(arg, item, f"{path}[{i}]")
                     for i, (arg, item) in enumerate(zip(args, value)))

    def _decode_dict(self, args, value, path):
        self._expect(value, dict, path)
        value_type = args[1] if len(args) == 2 else Any
        return {key: self._decode_value(value_type, item, f"{path}.{key}") for key, item in value.items()}

    def _decode_dataclass(self, target, value, path):
        self._expect(value, dict, path)
        hints = typing.get_type_hints(target)
        kwargs = {}
        for f in dataclasses.fields(target):
            if not f.init:
                continue
            field_path = f"{path}.{f.name}"
            field_type = hints.get(f.name, Any)
            raw = value.get(f.name, _MISSING)
            if raw is _MISSING:
                if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
                    continue
                if accepts_none(field_type):
                    kwargs[f.name] = None
                    continue
                raise DecodingError(f"Missing required field {f.name!r}", field_path)
            kwargs[f.name] = self._decode_value(field_type, raw, field_path)
        return target(**kwargs)

    @staticmethod
    def _expect(value, expected, path):
        if not isinstance(value, expected):
            raise DecodingError(f"Expected {expected.__name__}, got {type(value).__name__}", path)
        return value


def accepts_none(target: Any) -> bool:
    """True when `target` can hold None (Any, None, Optional[...] or a Union with None)."""
    if target is Any or target is None or target is _NoneType:
        return True
    return _is_union(target) and _NoneType in typing.get_args(target)


def _is_union(target: Any) -> bool:
    origin = typing.get_origin(target)
    return origin is Union or (hasattr(types, 'UnionType') and origin is types.UnionType)


def _type_name(target: Any) -> str:
    return getattr(target, '__name__', repr(target))
