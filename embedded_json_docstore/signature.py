from __future__ import annotations
from typing import Any, Dict, Mapping, Union
from .errors import InvalidSignatureError, ValidationError
from .response import Response, get_response
from .utils import is_falsy_value

FIND = "$find"
SET = "$set"
VALID_KEYS = (FIND, SET)

ID_FIELD = "_id"

INVALID_SIGNATURE_MSG = (
    "Invalid Update Data Object Signature. "
    "Please call update_signature() to check the valid object signature"
)
ID_UPDATE_MSG = "Cannot update _id it is system generated value"


def update_signature() -> Dict[str, Dict[str, Any]]:
    """
    Template of a valid update request. $find only supports AND over equality.
    """
    return {FIND: {}, SET: {}}


def _is_missing(value: Any) -> bool:
    # null and "" mark an unset slot; False/0/-0 are legitimate values
    if is_falsy_value(value):
        return False
    return value is None or value == ""


def check_update_signature(update: Any) -> None:
    if not isinstance(update, Mapping):
        raise InvalidSignatureError(INVALID_SIGNATURE_MSG)
    if not all(key in VALID_KEYS for key in update):
        raise InvalidSignatureError(INVALID_SIGNATURE_MSG)
    for key, body in update.items():
        if not isinstance(body, Mapping):
            raise InvalidSignatureError(INVALID_SIGNATURE_MSG)
        for field, value in body.items():
            if key == SET and field == ID_FIELD:
                raise ValidationError(ID_UPDATE_MSG)
            if _is_missing(value):
                raise InvalidSignatureError(INVALID_SIGNATURE_MSG)


def validate_update_signature(update: Any) -> Union[bool, Response]:
    """
    True for a valid request, False for a malformed one, and a failure
    Response when $set tries to touch _id.
    """
    try:
        check_update_signature(update)
    except InvalidSignatureError:
        return False
    except ValidationError as exc:
        return get_response(False, str(exc))
    return True
