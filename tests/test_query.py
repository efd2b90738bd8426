import pytest
from embedded_json_docstore import ValidationError, match_all, match_document
from embedded_json_docstore.query import iter_matches, strict_equal

DOCS = [
    {"id": 1, "name": "yo", "email": "its@d.com", "active": True},
    {"id": 2, "name": "Yo", "email": "other@d.com", "active": False},
    {"id": 3, "name": "yo", "email": "third@d.com", "active": True},
    {"id": "1", "name": "str-id"},
]

def test_equality_conjunction():
    got = match_all(DOCS, {"name": "yo", "active": True})
    assert [d["id"] for d in got] == [1, 3]
    assert match_all(DOCS, {"name": "yo", "email": "its@d.com"}) == [DOCS[0]]
    assert match_all(DOCS, {"name": "yo", "email": "nobody@d.com"}) == []

def test_case_and_type_sensitive():
    assert [d["id"] for d in match_all(DOCS, {"name": "Yo"})] == [2]
    # no numeric/string coercion
    assert match_all(DOCS, {"id": 1}) == [DOCS[0]]
    assert match_all(DOCS, {"id": "1"}) == [DOCS[3]]
    # bool is not a number
    assert match_all([{"v": 1}, {"v": True}], {"v": True}) == [{"v": True}]
    assert match_all([{"v": 0}, {"v": False}], {"v": 0}) == [{"v": 0}]

def test_missing_field_never_matches():
    assert match_all(DOCS, {"active": None}) == []
    assert match_all([{"a": None}], {"a": None}) == [{"a": None}]

def test_empty_filter_matches_nothing():
    assert match_all(DOCS, {}) == []
    assert match_all(DOCS, {}, want_indices=True) == []

def test_indices_are_positions_in_input():
    got = match_all(DOCS, {"name": "yo"}, want_indices=True)
    assert got == [{0: DOCS[0]}, {2: DOCS[2]}]
    assert [i for i, _ in iter_matches(DOCS, {"active": False})] == [1]

def test_non_mapping_filter_rejected():
    with pytest.raises(ValidationError):
        match_all(DOCS, ["name", "yo"])

def test_strict_equal_nested_values():
    assert strict_equal({"a": [1, 2.0]}, {"a": [1.0, 2]})
    assert not strict_equal({"a": [1, True]}, {"a": [1, 1]})
    assert not strict_equal([1, 2], [1, 2, 3])
    assert not strict_equal({"a": 1}, {"a": 1, "b": 2})
    assert match_document({"tags": ["x", "y"]}, {"tags": ["x", "y"]})
    assert not match_document({"tags": ["x", "y"]}, {"tags": ["y", "x"]})
