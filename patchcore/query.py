"""Column to SQL expression mapping derived from dataclass field metadata.

Field metadata keys: ``column`` (result column name, defaults to the field
name), ``query`` (SQL expression, defaults to the column), ``order_query``
(expression for ordering, defaults to the query) and ``embed`` (flatten the
fields of a nested dataclass).
"""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Union

from .envutil import parse_bool
from .logs import log
from .timestamps import parse_rfc3339, remove_invalid_chars

AttrParser = Callable[[str], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT_MIN, _INT_MAX = -(1 << 63), (1 << 63) - 1
_UNION_TYPES = (Union, types.UnionType)

_NAMED_TYPES = {
    "str": str,
    "int": int,
    "bool": bool,
    "float": float,
    "bytes": bytes,
    "datetime": datetime,
    "datetime.datetime": datetime,
}


class QueryAttrError(TypeError):
    """The given object has no usable field description."""


@dataclass(frozen=True)
class AttrInfo:
    data_query: str
    order_query: str = ""
    parser: Optional[AttrParser] = None


def _parse_int(s: str) -> int:
    if not _INT_RE.fullmatch(s):
        raise ValueError(f"invalid integer: {s!r}")
    value = int(s)
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"integer out of range: {s!r}")
    return value


def _strip_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in _UNION_TYPES:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return None


def _resolve_annotation(annotation: Any) -> Any:
    """Turn a string annotation of a simple type into the type; else leave it."""
    if not isinstance(annotation, str):
        return annotation
    text = annotation.strip()
    for prefix in ("Optional[", "typing.Optional["):
        if text.startswith(prefix) and text.endswith("]"):
            return Optional[_resolve_annotation(text[len(prefix):-1])]
    parts = [part.strip() for part in text.split("|")]
    if len(parts) > 1:
        rest = [part for part in parts if part != "None"]
        if len(rest) == 1 and len(parts) == 2:
            return Optional[_resolve_annotation(rest[0])]
        return text
    return _NAMED_TYPES.get(text, text)


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _embedded_type(fld: dataclasses.Field, tp: Any) -> Any:
    if _is_dataclass_type(tp):
        return tp
    embed = fld.metadata.get("embed")
    if _is_dataclass_type(embed):
        return embed
    factory = fld.default_factory
    if _is_dataclass_type(factory):
        return factory
    return None


def parser_for_type(tp: Any) -> Optional[AttrParser]:
    """Parser turning a query string into a value of ``tp``; None if there is none."""
    tp = _resolve_annotation(tp)
    inner = _strip_optional(tp)
    if inner is not None:
        return parser_for_type(inner)
    if tp is str:
        return remove_invalid_chars
    if tp is bool:
        return parse_bool
    if tp is int:
        return _parse_int
    if tp is datetime:
        return parse_rfc3339
    log("attribute", getattr(tp, "__name__", str(tp))).debug("No query parser found")
    return None


def _query_from_type(cls: Any) -> tuple[dict[str, AttrInfo], list[str]]:
    if not _is_dataclass_type(cls):
        raise QueryAttrError("Only struct kind is supported")
    attrs: dict[str, AttrInfo] = {}
    names: list[str] = []
    for fld in dataclasses.fields(cls):
        tp = _resolve_annotation(fld.type)
        meta = fld.metadata
        if meta.get("embed"):
            nested_type = _embedded_type(fld, tp)
            if nested_type is not None:
                nested, nested_names = _query_from_type(nested_type)
                names.extend(nested_names)
                attrs.update(nested)
                continue
        column = meta.get("column", fld.name)
        data_query = meta.get("query", column)
        attrs[column] = AttrInfo(
            data_query=data_query,
            order_query=meta.get("order_query", data_query),
            parser=parser_for_type(tp),
        )
        # Every column is listed, rows are loaded by position.
        names.append(column)
    return attrs, names


def get_query_attrs(obj: Any) -> tuple[dict[str, AttrInfo], list[str]]:
    """Attribute map and ordered column names of a dataclass, instance or list of them."""
    origin = typing.get_origin(obj)
    if origin is not None:
        inner = _strip_optional(obj)
        if inner is not None:
            return _query_from_type(inner)
        if origin in (list, tuple) and typing.get_args(obj):
            return _query_from_type(typing.get_args(obj)[0])
        raise QueryAttrError("Invalid type")
    if isinstance(obj, type):
        return _query_from_type(obj)
    if dataclasses.is_dataclass(obj):
        return _query_from_type(type(obj))
    if isinstance(obj, (list, tuple)) and obj:
        return _query_from_type(type(obj[0]))
    raise QueryAttrError("Invalid type")


def must_get_query_attrs(obj: Any) -> dict[str, AttrInfo]:
    attrs, _ = get_query_attrs(obj)
    return attrs


def must_get_select(obj: Any) -> str:
    """SELECT list of "<query> as <column>" items in field order."""
    attrs, names = get_query_attrs(obj)
    return ", ".join(f"{attrs[name].data_query} as {name}" for name in names)