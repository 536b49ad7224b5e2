from typing import Any, Dict, List

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.user import UserModel, ROLES
from app.domain.errors import (
    AccessDenied,
    AuthenticationFailed,
    BusinessRuleViolation,
    DuplicateEntry,
    InvalidInput,
    NotFound,
)
from app.domain.schemas import UserLogin, UserRead, UserRegister, UserUpdate
from app.repos.user_repo import UserRepo
from app.services.token_service import TokenService
from app.utils.settings import BCRYPT_ROUNDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    # bcrypt i tak bierze tylko 72 bajty
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))


class UserService:
    """Rejestracja, logowanie i zarzadzanie uzytkownikami przez admina."""

    def __init__(self, db: Session, token_service: TokenService | None = None):
        self.repo = UserRepo(db)
        self.tokens = token_service or TokenService()

    # =====================================================
    # AUTH
    # =====================================================
    def register(self, payload: UserRegister) -> Dict[str, Any]:
        user = self._create(payload.name, payload.email, payload.password, role="customer")
        logger.info(f"User {user.id} registered")
        return {"token": self.tokens.issue(user.id, user.role), "user": user}

    def login(self, payload: UserLogin) -> Dict[str, Any]:
        user = self.repo.get_by_email(payload.email.lower())
        if not user or not verify_password(payload.password, user.password_hash):
            raise AuthenticationFailed("Invalid credentials")

        return {"token": self.tokens.issue(user.id, user.role), "user": UserRead.model_validate(user)}

    # =====================================================
    # ADMIN
    # =====================================================
    def create_operative(self, payload: UserRegister) -> UserRead:
        user = self._create(payload.name, payload.email, payload.password, role="operative")
        logger.info(f"Operative user {user.id} created")
        return user

    def list_operatives(self) -> List[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_by_role("operative")]

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)
        return UserRead.model_validate(user)

    def update_user(self, acting_user_id: int, user_id: int, payload: UserUpdate) -> UserRead:
        if payload.role not in ROLES:
            raise InvalidInput("Invalid role", role=payload.role, allowed=list(ROLES))

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)

        # admin nie moze sam sobie zabrac roli admina
        if acting_user_id == user_id and user.role == "admin" and payload.role != "admin":
            raise AccessDenied("An administrator cannot revoke their own admin role")

        email = payload.email.lower()
        other = self.repo.get_by_email(email)
        if other and other.id != user_id:
            raise DuplicateEntry("Email already in use by another user", email=email)

        user.name = payload.name
        user.email = email
        user.role = payload.role
        try:
            self.repo.save(user)
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateEntry("Email already in use by another user", email=email)

        logger.info(f"User {user_id} updated by {acting_user_id} (role={user.role})")
        return UserRead.model_validate(user)

    def delete_operative(self, acting_user_id: int, user_id: int) -> None:
        if acting_user_id == user_id:
            raise BusinessRuleViolation("An administrator cannot delete themselves through this endpoint")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)

        if user.role != "operative":
            raise BusinessRuleViolation(
                f"This endpoint only deletes operative users; selected user has role '{user.role}'",
                role=user.role,
            )

        self.repo.delete(user)
        logger.info(f"Operative user {user_id} deleted by {acting_user_id}")

    def ensure_admin(self, name: str, email: str, password: str) -> bool:
        """Seed: tworzy admina jesli nie ma zadnego. True jesli utworzono."""
        if self.repo.list_by_role("admin"):
            return False
        self._create(name, email, password, role="admin")
        return True

    def _create(self, name: str, email: str, password: str, role: str) -> UserRead:
        email = email.lower()
        if self.repo.get_by_email(email):
            raise DuplicateEntry("User already exists", email=email)

        user = UserModel(name=name, email=email, password_hash=hash_password(password), role=role)
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateEntry("User already exists", email=email)

        return UserRead.model_validate(created)
