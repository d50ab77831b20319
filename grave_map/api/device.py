"""Device identity resolution for anonymous visitors."""

import hashlib
import uuid

from fastapi import Request, Response

from ..config import settings


def resolve_device_hash(request: Request, response: Response) -> str:
    """
    Opaque per-device identifier for the current request.

    Checks the device header, then the device cookie. A new visitor gets a
    random hash which is also set as a long-lived cookie on the response.
    """
    header_value = request.headers.get(settings.device_header_name)
    if header_value:
        return header_value

    cookie_value = request.cookies.get(settings.device_cookie_name)
    if cookie_value:
        return cookie_value

    user_agent = request.headers.get("user-agent", "unknown")
    fallback = hashlib.sha256(f"{uuid.uuid4()}::{user_agent}".encode()).hexdigest()

    response.set_cookie(
        settings.device_cookie_name,
        fallback,
        max_age=settings.device_cookie_max_age,
        httponly=True,
        samesite="lax",
    )
    return fallback
