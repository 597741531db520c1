# FastAPI dependencies: injected stores and per-route authentication guards.
import enum
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quiz_studio.auth import AuthService
from quiz_studio.errors import Forbidden, Unauthorized
from quiz_studio.models import UserRole
from quiz_studio.quiz_store import QuizRepository
from quiz_studio.tokens import TokenPayload, TokenService
from quiz_studio.users import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


class AuthRequirement(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def get_quiz_store(request: Request) -> QuizRepository:
    return request.app.state.quizzes


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_auth_service(
    users: UserRepository = Depends(get_users),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(users, tokens)


# Build the guard for a route's requirement. Credentials are checked before
# any role or ownership decision, so a missing token is always a 401.
def guard(requirement: AuthRequirement) -> Callable[..., Optional[TokenPayload]]:
    def check(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        auth: AuthService = Depends(get_auth_service),
    ) -> Optional[TokenPayload]:
        if requirement is AuthRequirement.PUBLIC:
            return None
        if credentials is None:
            raise Unauthorized("missing bearer token")
        payload = auth.authenticate(credentials.credentials)
        if requirement is AuthRequirement.ADMIN and payload.role != UserRole.ADMIN.value:
            raise Forbidden("insufficient role")
        return payload

    return check


public = guard(AuthRequirement.PUBLIC)
authenticated = guard(AuthRequirement.AUTHENTICATED)
admin_only = guard(AuthRequirement.ADMIN)
