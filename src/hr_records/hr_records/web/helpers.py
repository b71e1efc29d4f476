from __future__ import annotations

from typing import Any

from flask import request

from ..audit.model import RequestMeta


def request_meta() -> RequestMeta:
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.remote_addr or "")
    return RequestMeta(ip=ip, user_agent=request.headers.get("User-Agent", ""))


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
