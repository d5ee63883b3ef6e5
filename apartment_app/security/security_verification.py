import uuid

from bcrypt import checkpw
from jose import ExpiredSignatureError, JWTError, jwt

from core.settings import settings

from .security_generate import ACCESS_TOKEN_TYPE


class TokenError(ValueError):
    pass


class UserVerification:
    def verify_password(self, raw_password: str, hashed_password: str) -> bool:
        try:
            return checkpw(
                raw_password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            # malformed stored hash
            return False

    def decode_access_token(self, token: str) -> uuid.UUID:
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
            )
        except ExpiredSignatureError:
            raise TokenError("Token expired")
        except JWTError:
            raise TokenError("Invalid token")

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenError("Invalid token type")

        subject = payload.get("sub")
        if not subject:
            raise TokenError("Token missing user ID")

        try:
            return uuid.UUID(subject)
        except ValueError:
            raise TokenError("Invalid user ID format in token")


user_verification = UserVerification()
