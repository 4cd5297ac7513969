"""Password hashing, signed tokens and the FastAPI auth dependencies."""
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Header, HTTPException, Request
from loguru import logger

from skillsync.utils.date_utils import utc_now

JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(user: Dict[str, Any], secret: str, expire_hours: int = 24) -> str:
    """Sign a token carrying the identity claims the frontend reads."""
    payload = {
        "id": user["id"],
        "email": user["email"],
        "role": user.get("role") or "student",
        "fullName": user.get("full_name"),
        "exp": utc_now() + timedelta(hours=expire_hours),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret: str) -> Dict[str, Any]:
    """Verify a token; raises ``jwt.InvalidTokenError`` when it is bad or expired."""
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])


def _token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[1].strip():
            return parts[1].strip()
    return request.cookies.get("token")


def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    """Resolve the caller from a Bearer header or the ``token`` cookie."""
    token = _token_from_request(request, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")
    try:
        return decode_access_token(token, request.app.state.settings.JWT_SECRET)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid or expired token")


def require_admin(request: Request, authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    user = get_current_user(request, authorization)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return user
