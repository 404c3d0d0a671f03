"""One-shot user notices stored in the signed session cookie."""

from fastapi import Request
from typing import Dict, List

_SESSION_KEY = "notices"

SUCCESS = "success"
ERROR = "error"


def flash(request: Request, message: str, category: str = SUCCESS) -> None:
    notices = list(request.session.get(_SESSION_KEY, []))
    notices.append({"message": message, "category": category})
    request.session[_SESSION_KEY] = notices


def pop_notices(request: Request) -> List[Dict[str, str]]:
    return request.session.pop(_SESSION_KEY, [])
