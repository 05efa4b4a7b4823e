from typing import Any, Dict, Optional, Tuple

from requests.auth import AuthBase, HTTPBasicAuth

from .settings import DEFAULT_API_KEY_HEADER

SECRET_FIELDS = ("key", "token", "password")


def build_auth(auth: Optional[Dict[str, Any]]) -> Tuple[Dict[str, str], Optional[AuthBase]]:
    """
    Turns an `authentication` mapping into request headers and a requests auth object.
    Only one of the two is ever populated.
    """
    auth = auth or {}
    auth_type = auth.get("type", "none")

    if auth_type == "api_key":
        header = auth.get("header") or DEFAULT_API_KEY_HEADER
        return {header: str(auth["key"])}, None
    if auth_type == "bearer":
        return {"Authorization": f"Bearer {auth['token']}"}, None
    if auth_type == "basic":
        return {}, HTTPBasicAuth(str(auth["username"]), str(auth["password"]))
    return {}, None


def redact(auth: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    safe = dict(auth or {"type": "none"})
    for f in SECRET_FIELDS:
        if f in safe:
            safe[f] = "***"
    return safe
