from .json_model import JsonModel, JsonSnakeCaseModel
from .msgspec import BaseStruct, SerializationError, decode_json, encode_json
from .utils import ContextVarManager, cached_classmethod, deep_merge, get_logger, get_now, is_dict, use_context_var

__all__ = [
    "BaseStruct",
    "ContextVarManager",
    "JsonModel",
    "JsonSnakeCaseModel",
    "SerializationError",
    "cached_classmethod",
    "decode_json",
    "deep_merge",
    "encode_json",
    "get_logger",
    "get_now",
    "is_dict",
    "use_context_var",
]
