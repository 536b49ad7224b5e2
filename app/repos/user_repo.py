from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def list_by_role(self, role: str) -> List[UserModel]:
        return list(
            self.db.execute(select(UserModel).where(UserModel.role == role).order_by(UserModel.id)).scalars()
        )

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user: UserModel) -> None:
        self.db.delete(user)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
