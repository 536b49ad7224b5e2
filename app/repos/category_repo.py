# app/repos/category_repo.py
from typing import List

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_by_name(self, name: str) -> CategoryModel | None:
        """Case-insensitive, jak w wyszukiwaniu po kategorii."""
        return self.db.execute(
            select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower())
        ).scalar_one_or_none()

    def list_categories(self) -> List[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars())

    def add(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def save(self, category: CategoryModel) -> CategoryModel:
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category: CategoryModel) -> None:
        self.db.delete(category)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
