import uuid

from fastapi import Request
from pydantic import BaseModel

from security.security_verification import TokenError, user_verification

from .errors import Unauthenticated, ValidationFailed


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if header:
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return request.cookies.get("access_token")


async def jwt_protect(request: Request) -> uuid.UUID:
    token = bearer_token(request)
    if not token:
        raise Unauthenticated("Not authenticated")

    try:
        return user_verification.decode_access_token(token)
    except TokenError as e:
        raise Unauthenticated(str(e))


def partial_changes(payload: BaseModel, nullable: frozenset[str] = frozenset()) -> dict:
    """Fields the client actually sent, rejecting explicit nulls on required columns."""
    changes = payload.model_dump(exclude_unset=True)
    errors = [
        {"field": field, "msg": "may not be null", "type": "null_not_allowed"}
        for field, value in changes.items()
        if value is None and field not in nullable
    ]
    if errors:
        raise ValidationFailed(errors)
    return changes
