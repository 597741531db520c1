# User records behind a repository interface, with an in-memory implementation.
import logging
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from quiz_studio.errors import Conflict, NotFound
from quiz_studio.models import User, UserRole, utcnow
from quiz_studio.security import hash_password, verify_password

logger = logging.getLogger(__name__)


# Storage interface for accounts; lookups are exact and return None on a miss.
class UserRepository(ABC):
    @abstractmethod
    def create(
        self,
        email: str,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_all(self) -> List[User]:
        ...

    @abstractmethod
    def touch(self, user_id: str) -> None:
        ...

    @abstractmethod
    def set_active(self, user_id: str, active: bool) -> User:
        ...

    def find_by_id_or_fail(self, user_id: str) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("user not found")
        return user

    @staticmethod
    def validate_password(password: str, password_hash: str) -> bool:
        return verify_password(password, password_hash)


class InMemoryUserDirectory(UserRepository):
    def __init__(self):
        self._users: List[User] = []

    # Uniqueness is checked email first, then username.
    def create(
        self,
        email: str,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        if self.find_by_email(email) is not None:
            raise Conflict("a user with this email already exists")
        if self.find_by_username(username) is not None:
            raise Conflict("a user with this username already exists")

        now = utcnow()
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            username=username,
            password_hash=hash_password(password),
            role=role,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self._users.append(user)
        logger.info("Created user %s (%s)", user.id, role.value)
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return next((user for user in self._users if user.email == email), None)

    def find_by_username(self, username: str) -> Optional[User]:
        return next(
            (user for user in self._users if user.username == username), None
        )

    def find_by_id(self, user_id: str) -> Optional[User]:
        return next((user for user in self._users if user.id == user_id), None)

    def find_all(self) -> List[User]:
        return list(self._users)

    def touch(self, user_id: str) -> None:
        user = self.find_by_id_or_fail(user_id)
        user.updated_at = utcnow()

    def set_active(self, user_id: str, active: bool) -> User:
        user = self.find_by_id_or_fail(user_id)
        user.is_active = active
        user.updated_at = utcnow()
        return user
