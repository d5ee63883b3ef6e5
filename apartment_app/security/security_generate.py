import uuid
from datetime import datetime, timedelta, timezone

from bcrypt import gensalt, hashpw
from jose import jwt

from core.settings import settings

ACCESS_TOKEN_TYPE = "access"


class UserGenerate:
    def hash_password(self, raw_password: str) -> str:
        salt = gensalt()
        return hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")

    def generate_access_token(
        self, user_id: uuid.UUID, expires_minutes: int | None = None
    ) -> str:
        minutes = (
            expires_minutes
            if expires_minutes is not None
            else settings.ACCESS_EXPIRE_MINUTES
        )
        exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
        return jwt.encode(
            {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE, "exp": exp},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )


user_generate = UserGenerate()
