from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import pytest

from patchcore.query import (
    QueryAttrError,
    get_query_attrs,
    must_get_query_attrs,
    must_get_select,
    parser_for_type,
)


@dataclass
class Inherited:
    bare: str = field(default="", metadata={"column": "bare"})


@dataclass
class QueryStruct:
    id: int = field(default=0, metadata={"query": "am.id", "column": "id"})
    int64: int = field(default=0, metadata={"query": "am.id", "column": "int64"})
    int32: int = field(default=0, metadata={"query": "am.id", "column": "int32"})
    flag: bool = field(default=False, metadata={"query": "am.id != 0", "column": "bool"})
    note: str = field(
        default="", metadata={"column": "note_str", "query": "COALESCE(am.text_note, '')"}
    )
    note2: int = field(
        default=0,
        metadata={"column": "note2", "query": "am.text_note", "order_query": "REVERSE(am.text_note)"},
    )
    date: datetime = field(default=datetime(2000, 1, 1), metadata={"column": "date"})
    date_ptr: Optional[datetime] = field(default=None, metadata={"column": "date"})
    inherited: Inherited = field(default_factory=Inherited, metadata={"embed": True})


@dataclass
class QueryInvalid:
    # Not embedded, taken as a plain field.
    test: Optional[Inherited] = None
    query_struct: QueryStruct = field(default_factory=QueryStruct, metadata={"embed": True})


def _check_attrs(attrs):
    assert attrs["id"].parser is not None
    assert attrs["id"].data_query == "am.id"
    assert attrs["note_str"].parser is not None
    assert attrs["note_str"].data_query == "COALESCE(am.text_note, '')"
    assert attrs["bare"].parser is not None
    assert attrs["bare"].data_query == "bare"


@pytest.mark.parametrize(
    "obj", [QueryStruct, QueryStruct(), [QueryStruct()], list[QueryStruct], Optional[QueryStruct]]
)
def test_get_attrs(obj):
    attrs, _ = get_query_attrs(obj)
    _check_attrs(attrs)


def test_list_of_strings_is_rejected():
    with pytest.raises(QueryAttrError):
        get_query_attrs(list[str])
    with pytest.raises(QueryAttrError):
        get_query_attrs(["x"])
    with pytest.raises(QueryAttrError):
        get_query_attrs([])


def test_non_struct_is_rejected():
    with pytest.raises(QueryAttrError):
        get_query_attrs(0)


def test_invalid_fields_are_kept_without_parser():
    attrs, names = get_query_attrs(QueryInvalid)
    assert attrs["test"].parser is None
    assert attrs["test"].data_query == "test"
    assert names[0] == "test"
    assert attrs["bare"].data_query == "bare"


def test_names_keep_field_order():
    _, names = get_query_attrs(QueryStruct)
    assert names == ["id", "int64", "int32", "bool", "note_str", "note2", "date", "date", "bare"]


def test_must_variants():
    assert must_get_query_attrs(QueryStruct)["id"].data_query == "am.id"
    assert must_get_select(QueryStruct).startswith("am.id as id")
    with pytest.raises(QueryAttrError):
        must_get_query_attrs(list[str])
    with pytest.raises(QueryAttrError):
        must_get_select(list[str])


def test_select():
    sel = must_get_select(QueryStruct())
    assert "am.id as id" in sel
    assert "COALESCE(am.text_note, '') as note_str" in sel
    assert "bare as bare" in sel


def test_order_query():
    info = must_get_query_attrs(QueryStruct())
    assert "note" not in info
    assert info["note_str"].order_query == info["note_str"].data_query
    assert info["note2"].order_query == "REVERSE(am.text_note)"


def test_parsers():
    attrs = must_get_query_attrs(QueryStruct)
    assert attrs["id"].parser("12") == 12
    assert attrs["bool"].parser("true") is True
    assert attrs["note_str"].parser("a\x00b") == "ab"
    assert attrs["date_ptr" if "date_ptr" in attrs else "date"].parser(
        "2020-01-02T03:04:05Z"
    ) == datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        attrs["id"].parser("1.5")
    with pytest.raises(ValueError):
        attrs["bool"].parser("maybe")


def test_parser_for_unknown_type_is_none():
    assert parser_for_type(dict) is None
    assert parser_for_type(Optional[int])("-3") == -3