# guardian/auth/tokens.py
from __future__ import annotations

from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from guardian.config import TOKEN_MAX_AGE


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt="guardian-auth")


def create_access_token(*, secret_key: str, user_id: int, email: str) -> str:
    return _serializer(secret_key).dumps({"user_id": int(user_id), "email": email})


def verify_access_token(
    *, secret_key: str, token: str, max_age_seconds: int = TOKEN_MAX_AGE
) -> Optional[int]:
    """
    Verify a token and return the user_id, or None if invalid/expired.
    """
    try:
        data = _serializer(secret_key).loads(token, max_age=max_age_seconds)
        uid = data.get("user_id")
        return int(uid) if uid is not None else None
    except SignatureExpired:
        # Token was valid but has expired
        return None
    except BadSignature:
        # Token is invalid / tampered
        return None
