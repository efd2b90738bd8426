from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Response:
    """
    Uniform result of every public operation.

    status  -- True on success.
    message -- human readable text on failure; on success either status text
               or the payload (a document list for find).
    """
    status: bool
    message: Any = ""

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


def get_response(status: bool, message: Any = "") -> Response:
    return Response(status, message)
