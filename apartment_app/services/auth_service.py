import logging

from sqlalchemy.exc import IntegrityError

from core.check_permission import CheckRolePermission
from core.errors import Conflict, NotFound, Unauthenticated
from models.enums import UserRole
from models.models import User
from repos.auth_repo import AuthRepo
from schemas.schema import LoginInput, TokenOut, UserCreate, UserOut, UserProfile
from security.security_generate import user_generate

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    def __init__(self, db):
        self.repo: AuthRepo = AuthRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()

    def _token_for(self, user: User) -> TokenOut:
        return TokenOut(
            access_token=user_generate.generate_access_token(user.id),
            role=user.role,
            user=UserOut.model_validate(user),
        )

    async def register(self, data: UserCreate) -> TokenOut:
        if await self.repo.get_by_email(email=data.email):
            raise Conflict("User already exists")

        user = User(name=data.name, email=data.email, role=UserRole.TENANT)
        user.set_password(raw_password=data.password)
        try:
            await self.repo.create(user)
        except IntegrityError:
            # lost a race on the unique email index
            raise Conflict("User already exists")

        logger.info("Registered tenant %s", user.id)
        return self._token_for(user)

    async def login(self, data: LoginInput) -> TokenOut:
        user = await self.repo.get_by_email(data.email)
        if not user or not user.check_password(raw_password=data.password):
            raise Unauthenticated(INVALID_CREDENTIALS)
        return self._token_for(user)

    async def me(self, current_user) -> UserProfile:
        await self.permission.check_authenticated(current_user)
        user = await self.repo.get_with_relations(current_user.id)
        if not user:
            raise NotFound("User not found")
        return UserProfile.model_validate(user)
