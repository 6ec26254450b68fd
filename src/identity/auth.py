"""Request identity.

The upstream identity provider authenticates the caller and forwards the
user id and role as headers. Guest carts are keyed by the ``sessionId``
cookie. Admin routers declare ``require_admin`` once as a router
dependency instead of checking roles inside each handler.
"""

from dataclasses import dataclass

from fastapi import Cookie, Depends, Header

from identity.user.user import UserRole
from shared.exceptions import AuthenticationRequired, AuthorizationError

SESSION_COOKIE = "sessionId"


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: str = UserRole.CUSTOMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def get_optional_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser | None:
    if not x_user_id:
        return None
    role = (x_user_role or UserRole.CUSTOMER.value).lower()
    return CurrentUser(user_id=x_user_id, role=role)


def get_current_user(user: CurrentUser | None = Depends(get_optional_user)) -> CurrentUser:
    if user is None:
        raise AuthenticationRequired("Authentication required")
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise AuthorizationError("Access denied")
    return user


def get_session_id(session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE)) -> str | None:
    return session_id
