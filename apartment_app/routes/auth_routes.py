from fastapi import APIRouter, Depends, Response, status
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.identity import Caller
from core.safe_handler import safe_handler
from core.settings import settings
from schemas.schema import LoginInput, TokenOut, UserCreate, UserProfile
from services.auth_service import AuthService

router = APIRouter(prefix="/api/users", tags=["Auth"])


@cbv(router=router)
class AuthRoutes:
    db: AsyncSession = Depends(get_db_async)

    @router.post(
        "/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED
    )
    @safe_handler
    async def register(self, payload: UserCreate):
        return await AuthService(self.db).register(payload)

    @router.post("/login", response_model=TokenOut)
    @safe_handler
    async def login(self, payload: LoginInput, response: Response):
        token = await AuthService(self.db).login(payload)
        response.set_cookie(
            key="access_token",
            value=token.access_token,
            httponly=True,
            samesite="lax",
            max_age=settings.ACCESS_EXPIRE_MINUTES * 60,
        )
        return token

    @router.get("/me", response_model=UserProfile)
    @safe_handler
    async def me(self, current_user: Caller = Depends(get_current_user)):
        return await AuthService(self.db).me(current_user)
