from embedded_json_docstore import Response, update_signature, validate_update_signature
from embedded_json_docstore.errors import InvalidSignatureError, ValidationError
from embedded_json_docstore.signature import ID_UPDATE_MSG, check_update_signature
import pytest

def test_template():
    assert update_signature() == {"$find": {}, "$set": {}}
    assert validate_update_signature(update_signature()) is True

def test_valid_requests():
    assert validate_update_signature({"$find": {"name": "yo"}, "$set": {"new": "v"}}) is True
    assert validate_update_signature({"$set": {"x": 1}}) is True
    assert validate_update_signature({}) is True

def test_unknown_top_level_key():
    assert validate_update_signature({"foo": {}, "$set": {}}) is False
    assert validate_update_signature({"name": "test"}) is False
    with pytest.raises(InvalidSignatureError):
        check_update_signature({"$find": {}, "$unset": {}})

def test_non_mapping_bodies():
    assert validate_update_signature({"$set": ["a"]}) is False
    assert validate_update_signature(["$find", "$set"]) is False

def test_id_in_set_is_a_dedicated_failure():
    res = validate_update_signature({"$find": {"id": 1}, "$set": {"_id": "x"}})
    assert isinstance(res, Response)
    assert res.status is False
    assert res.message == ID_UPDATE_MSG
    with pytest.raises(ValidationError):
        check_update_signature({"$set": {"_id": "x"}})

def test_id_in_find_is_allowed():
    assert validate_update_signature({"$find": {"_id": "abc"}, "$set": {"a": 1}}) is True

def test_falsy_data_values_permitted():
    for v in (False, 0, -0, 0.0):
        assert validate_update_signature({"$find": {"flag": v}, "$set": {"flag": v}}) is True
    # empty containers are values too
    assert validate_update_signature({"$set": {"tags": [], "meta": {}}}) is True

def test_missing_markers_rejected():
    assert validate_update_signature({"$set": {"a": None}}) is False
    assert validate_update_signature({"$find": {"a": ""}}) is False
