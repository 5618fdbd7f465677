from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response

from hrmaster.core.config import settings
from hrmaster.core.errors import NotAuthenticated, NotAuthorized
from hrmaster.core.ids import as_object_id
from hrmaster.core.security import create_access_token, verify_token
from hrmaster.models.users import User
from hrmaster.schemas.users import ChangePasswordRequest, LoginRequest, SignupRequest, Token, UserOut
from hrmaster.services import user_service
from hrmaster.services.permission import PermissionService

TOKEN_COOKIE = "token"


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    # an explicit header wins over the browser cookie
    if authorization:
        try:
            scheme, value = authorization.split()
        except ValueError:
            raise NotAuthenticated("Invalid authorization header format. Use: Bearer <token>")
        if scheme.lower() != "bearer":
            raise NotAuthenticated("Invalid authentication scheme")
        return value
    return request.cookies.get(TOKEN_COOKIE)


async def get_current_user_dependency(
    request: Request, authorization: Optional[str] = Header(None)
) -> User:
    token = _extract_token(request, authorization)
    if not token:
        raise NotAuthenticated()

    payload = verify_token(token)
    if payload is None:
        raise NotAuthenticated("Could not validate credentials - Invalid token")
    if payload.get("type") != "access":
        raise NotAuthenticated("Invalid token type - Use access token")

    oid = as_object_id(payload.get("sub"))
    user = await User.get(oid) if oid else None
    if user is None:
        raise NotAuthenticated("User not found")
    if not user.is_active:
        raise NotAuthorized("Account is disabled. Contact your administrator.")

    user.last_active = datetime.utcnow()
    await user.save()
    return user


get_current_user = get_current_user_dependency


async def require_privileged(current_user: User = Depends(get_current_user_dependency)) -> User:
    PermissionService.ensure_privileged(current_user)
    return current_user


class AuthRouter:
    def __init__(self):
        self.router = APIRouter(prefix="/auth", tags=["authentication"])
        self.setup_routes()

    def setup_routes(self):
        self.router.add_api_route("/signup", self.signup, methods=["POST"], response_model=UserOut, status_code=201)
        self.router.add_api_route("/login", self.login, methods=["POST"], response_model=Token)
        self.router.add_api_route("/logout", self.logout, methods=["POST"])
        self.router.add_api_route("/me", self.me, methods=["GET"], response_model=UserOut)
        self.router.add_api_route("/bootstrap", self.bootstrap, methods=["GET"])
        self.router.add_api_route("/change-password", self.change_password, methods=["POST"])

    async def signup(self, data: SignupRequest):
        user = await user_service.signup(**data.model_dump())
        return UserOut.from_user(user)

    async def login(self, data: LoginRequest, response: Response):
        user = await user_service.authenticate(data.username, data.password)
        access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
        response.set_cookie(
            TOKEN_COOKIE,
            access_token,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
            max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
        return Token(access_token=access_token, user=UserOut.from_user(user))

    async def logout(self, response: Response):
        response.delete_cookie(TOKEN_COOKIE)
        return {"message": "Logged out"}

    async def me(self, current_user: User = Depends(get_current_user_dependency)):
        return UserOut.from_user(current_user)

    async def bootstrap(self):
        return {"has_users": await user_service.has_users()}

    async def change_password(
        self, data: ChangePasswordRequest, current_user: User = Depends(get_current_user_dependency)
    ):
        await user_service.change_password(current_user, data.current_password, data.new_password)
        return {"message": "Password changed successfully"}


auth_router = AuthRouter().router
