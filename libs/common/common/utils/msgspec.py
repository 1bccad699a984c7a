from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, overload
from uuid import UUID

import msgspec

from common.utils.json_model import JsonModel

Serializer = Callable[[Any], Any]

type TypeEncodersMap = dict[Any, Callable[[Any], Any]]


class SerializationError(Exception):
    """Encoding or decoding of an object failed."""


__all__ = (
    "BaseStruct",
    "SerializationError",
    "decode_json",
    "default_serializer",
    "encode_json",
)

DEFAULT_TYPE_ENCODERS: TypeEncodersMap = {
    Path: str,
    PurePath: str,
    UUID: str,
    datetime: lambda val: val.isoformat(),
    date: lambda val: val.isoformat(),
    time: lambda val: val.isoformat(),
    Decimal: lambda val: int(val) if val.as_tuple().exponent >= 0 else float(val),
    Enum: lambda val: val.value,
    JsonModel: lambda val: val.to_dict(mode="json"),
    BaseException: repr,
    set: list,
    frozenset: list,
    bytes: lambda val: val.decode("utf-8", errors="replace"),
}


def default_serializer(value: Any, type_encoders: TypeEncodersMap | None = None) -> Any:
    """Transform values non-natively supported by ``msgspec``

    Args:
        value: A value to serialize
        type_encoders: Mapping of types to callables to transform types
    Returns:
        A serialized value
    Raises:
        TypeError: if value is not supported
    """
    type_encoders = DEFAULT_TYPE_ENCODERS if type_encoders is None else {**DEFAULT_TYPE_ENCODERS, **type_encoders}

    for base in value.__class__.__mro__[:-1]:
        try:
            encoder = type_encoders[base]
            return encoder(value)
        except KeyError:
            continue

    raise TypeError(f"Unsupported type: {type(value)!r}")


_default_json_encoder = msgspec.json.Encoder(enc_hook=default_serializer)
_default_json_decoder = msgspec.json.Decoder()


def encode_json(value: Any, serializer: Serializer | None = None) -> bytes:
    """Encode a value into JSON.

    Raises:
        SerializationError: If error encoding ``value``.
    """
    try:
        return msgspec.json.encode(value, enc_hook=serializer) if serializer else _default_json_encoder.encode(value)
    except (TypeError, msgspec.EncodeError) as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error


@overload
def decode_json(value: str | bytes) -> Any: ...


@overload
def decode_json[T](value: str | bytes, target_type: type[T], strict: bool = ...) -> T: ...


def decode_json(value: str | bytes, target_type: Any = None, strict: bool = True) -> Any:
    """Decode JSON bytes, optionally validating them into ``target_type`` (a Struct or any msgspec-supported type).

    Raises:
        SerializationError: If ``value`` is not valid JSON or does not match ``target_type``.
    """
    try:
        if target_type is None:
            return _default_json_decoder.decode(value)
        return msgspec.json.decode(value, type=target_type, strict=strict)
    except (msgspec.DecodeError, msgspec.ValidationError) as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error


class BaseStruct(msgspec.Struct):
    def to_dict(self) -> dict[str, Any]:
        return {f: getattr(self, f) for f in self.__struct_fields__ if getattr(self, f, None) != msgspec.UNSET}
