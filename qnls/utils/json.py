from enum import Enum
from typing import Any, TypeVar, cast

_MARKER_ATTRIBUTE = "_json_encodable.5f0c3b52-7d1e-4e8a-9a86-2d4bfc1de7a1"
_MARKER_SENTINEL = object()


T = TypeVar("T", bound=type)


def json_encodable(cls: T) -> T:
    """
    Class decorator to indicate compatibility with `json_default`.

    A class instance encodes as a JSON object that contains instance attributes and
    `@property`-decorated properties, except those starting with '_'.
    """
    setattr(cls, _MARKER_ATTRIBUTE, _MARKER_SENTINEL)
    return cls


def json_default(obj: Any) -> Any:
    """
    Custom JSON encoder, passed as `json.dumps(default=json_default)`.

    Besides `@json_encodable` classes, it encodes enums by name and numpy scalars as Python numbers.
    """
    if isinstance(obj, Enum):
        return obj.name
    if hasattr(obj, "item") and hasattr(obj, "dtype"):  # numpy scalar
        return obj.item()

    typ = type(obj)
    if getattr(typ, _MARKER_ATTRIBUTE, None) is not _MARKER_SENTINEL:
        raise TypeError(f"cannot encode {typ}")

    d = {}
    for mem, val in cast(dict[str, Any], vars(obj)).items():
        if mem[:1] != "_":
            d[mem] = val
    for mem in dir(typ):
        if mem[:1] == "_":
            continue
        prop = getattr(typ, mem)
        if isinstance(prop, property) and prop.fget:
            d[mem] = prop.fget(obj)
    return d
