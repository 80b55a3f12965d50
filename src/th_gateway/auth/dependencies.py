"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    @router.post("/checkout")
    async def checkout(user: Annotated[CurrentUser, Depends(get_current_user)]):
        ...
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.th_common.enums import UserRole
from src.th_common.errors import AdminRequiredError, InvalidCredentialsError
from src.th_gateway.auth.jwt_handler import decode_token

# Tokens are issued by the storefront; tokenUrl only feeds Swagger's Authorize button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Validate the Bearer token and return the caller. HTTP 401 otherwise."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return CurrentUser(id=payload["sub"], role=payload.get("role", UserRole.USER.value))


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
