# Signed access/refresh token issuance and verification.
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from quiz_studio.config import (
    get_access_token_ttl,
    get_jwt_refresh_secret,
    get_jwt_secret,
    get_refresh_token_ttl,
)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("sub", "email", "role", "iat", "exp")


# Any token that fails verification: bad signature, wrong secret, expired.
class TokenInvalid(Exception):
    pass


@dataclass(frozen=True)
class TokenPayload:
    sub: str
    email: str
    role: str
    iat: Optional[int] = None
    exp: Optional[int] = None


# Access and refresh tokens share one payload and differ only in signing secret.
class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_config(cls) -> "TokenService":
        return cls(
            access_secret=get_jwt_secret(),
            refresh_secret=get_jwt_refresh_secret(),
            access_ttl=get_access_token_ttl(),
            refresh_ttl=get_refresh_token_ttl(),
        )

    def _issue(self, payload: TokenPayload, secret: str, ttl: timedelta) -> str:
        now = datetime.now(tz=timezone.utc)
        claims: Dict[str, Any] = {
            "sub": payload.sub,
            "email": payload.email,
            "role": payload.role,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=ALGORITHM)

    def issue_access_token(self, payload: TokenPayload) -> str:
        return self._issue(payload, self.access_secret, self.access_ttl)

    def issue_refresh_token(self, payload: TokenPayload) -> str:
        return self._issue(payload, self.refresh_secret, self.refresh_ttl)

    def verify(self, token: str, secret: str) -> TokenPayload:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.PyJWTError as exc:
            raise TokenInvalid(str(exc)) from exc
        return TokenPayload(
            sub=str(claims["sub"]),
            email=str(claims["email"]),
            role=str(claims["role"]),
            iat=claims["iat"],
            exp=claims["exp"],
        )

    def verify_access(self, token: str) -> TokenPayload:
        return self.verify(token, self.access_secret)

    def verify_refresh(self, token: str) -> TokenPayload:
        return self.verify(token, self.refresh_secret)
