# Registration, login, token refresh and profile lookups.
import logging
from typing import List

from quiz_studio.errors import Forbidden, Unauthorized
from quiz_studio.models import User
from quiz_studio.schemas import AuthOut, RefreshOut, UserOut
from quiz_studio.tokens import TokenInvalid, TokenPayload, TokenService
from quiz_studio.users import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"
ACCOUNT_DISABLED = "this account has been disabled"
INVALID_REFRESH_TOKEN = "invalid or expired refresh token"
INVALID_ACCESS_TOKEN = "invalid or expired token"


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    # Drop the password hash before a user leaves the service.
    @staticmethod
    def sanitize(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            username=user.username,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @staticmethod
    def _payload_for(user: User) -> TokenPayload:
        return TokenPayload(sub=user.id, email=user.email, role=user.role.value)

    def _issue_pair(self, user: User) -> AuthOut:
        payload = self._payload_for(user)
        return AuthOut(
            access_token=self.tokens.issue_access_token(payload),
            refresh_token=self.tokens.issue_refresh_token(payload),
            user=self.sanitize(user),
        )

    def register(self, email: str, password: str, username: str) -> AuthOut:
        user = self.users.create(email, username, password)
        logger.info("Registered user %s", user.id)
        return self._issue_pair(user)

    # An inactive account is rejected before its password is checked.
    def login(self, email: str, password: str) -> AuthOut:
        user = self.users.find_by_email(email)
        if user is None:
            logger.warning("Login failed: unknown email")
            raise Unauthorized(INVALID_CREDENTIALS)
        if not user.is_active:
            logger.warning("Login refused for disabled user %s", user.id)
            raise Forbidden(ACCOUNT_DISABLED)
        if not self.users.validate_password(password, user.password_hash):
            logger.warning("Login failed: bad password for user %s", user.id)
            raise Unauthorized(INVALID_CREDENTIALS)

        self.users.touch(user.id)
        return self._issue_pair(user)

    # Every failure collapses into one message; the refresh token is not rotated.
    def refresh(self, refresh_token: str) -> RefreshOut:
        try:
            payload = self.tokens.verify_refresh(refresh_token)
        except TokenInvalid as exc:
            logger.warning("Refresh rejected: %s", exc)
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        user = self.users.find_by_id(payload.sub)
        if user is None or not user.is_active:
            logger.warning("Refresh rejected: subject %s unavailable", payload.sub)
            raise Unauthorized(INVALID_REFRESH_TOKEN)

        return RefreshOut(
            access_token=self.tokens.issue_access_token(self._payload_for(user))
        )

    # Verify an access token and make sure its subject can still act.
    def authenticate(self, access_token: str) -> TokenPayload:
        try:
            payload = self.tokens.verify_access(access_token)
        except TokenInvalid:
            raise Unauthorized(INVALID_ACCESS_TOKEN)

        user = self.users.find_by_id(payload.sub)
        if user is None:
            raise Unauthorized("user not found")
        if not user.is_active:
            raise Unauthorized("account disabled")
        return payload

    def get_current_user(self, user_id: str) -> UserOut:
        return self.sanitize(self.users.find_by_id_or_fail(user_id))

    def list_users(self) -> List[UserOut]:
        return [self.sanitize(user) for user in self.users.find_all()]

    # Takes effect on the user's next request, since authenticate re-reads the flag.
    def set_user_active(self, user_id: str, active: bool) -> UserOut:
        user = self.users.set_active(user_id, active)
        logger.info("User %s %s", user.id, "enabled" if active else "disabled")
        return self.sanitize(user)
