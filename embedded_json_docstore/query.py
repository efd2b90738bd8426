from __future__ import annotations
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple, Union
from .errors import ValidationError

_NUMBER = (int, float)


def strict_equal(a: Any, b: Any) -> bool:
    """
    Exact equality without coercion: True != 1, 1 != "1". int and float are one
    JSON number type, so 1 == 1.0. Objects and arrays compare structurally.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if isinstance(a, _NUMBER) or isinstance(b, _NUMBER):
        return isinstance(a, _NUMBER) and isinstance(b, _NUMBER) and a == b
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if a.keys() != b.keys():
            return False
        return all(strict_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) or isinstance(b, list):
        if not (isinstance(a, list) and isinstance(b, list)) or len(a) != len(b):
            return False
        return all(strict_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


def match_document(doc: Mapping[str, Any], flt: Mapping[str, Any]) -> bool:
    # AND over all pairs; stops at the first miss
    for key, expected in flt.items():
        if key not in doc:
            return False
        if not strict_equal(doc[key], expected):
            return False
    return True


def iter_matches(
    documents: Sequence[Mapping[str, Any]], flt: Mapping[str, Any]
) -> Iterator[Tuple[int, Mapping[str, Any]]]:
    """
    Yield (position, document) for every match, in collection order.
    An empty filter yields nothing.
    """
    if not isinstance(flt, Mapping):
        raise ValidationError("Filter must be an object mapping field names to values")
    if not flt:
        return
    for index, doc in enumerate(documents):
        if isinstance(doc, Mapping) and match_document(doc, flt):
            yield index, doc


def match_all(
    documents: Sequence[Mapping[str, Any]],
    flt: Mapping[str, Any],
    want_indices: bool = False,
) -> Union[List[Mapping[str, Any]], List[Dict[int, Mapping[str, Any]]]]:
    """
    Return the matching documents, or with want_indices a list of
    {position: document} pairs. Positions index into ``documents``.
    """
    if want_indices:
        return [{index: doc} for index, doc in iter_matches(documents, flt)]
    return [doc for _, doc in iter_matches(documents, flt)]
