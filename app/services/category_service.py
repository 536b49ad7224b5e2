# app/services/category_service.py
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.category import CategoryModel
from app.domain.errors import BusinessRuleViolation, DuplicateEntry, NotFound
from app.domain.schemas import CategoryIn, CategoryOut
from app.repos.category_repo import CategoryRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.repo = CategoryRepo(db)
        self.products = ProductRepo(db)

    def list_categories(self) -> List[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.list_categories()]

    def get_category(self, category_id: int) -> CategoryOut:
        return CategoryOut.model_validate(self._get(category_id))

    def create_category(self, payload: CategoryIn) -> CategoryOut:
        name = payload.name.strip()
        # nazwy unikalne bez wzgledu na wielkosc liter (szukanie produktow po nazwie kategorii)
        if self.repo.get_by_name(name):
            raise DuplicateEntry("Category already exists", name=name)

        try:
            category = self.repo.add(CategoryModel(name=name, image_url=payload.image_url))
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateEntry("Category already exists", name=name)

        logger.info(f"Category {category.id} '{name}' created")
        return CategoryOut.model_validate(category)

    def update_category(self, category_id: int, payload: CategoryIn) -> CategoryOut:
        category = self._get(category_id)
        name = payload.name.strip()

        other = self.repo.get_by_name(name)
        if other and other.id != category_id:
            raise DuplicateEntry("Category name already in use", name=name)

        category.name = name
        category.image_url = payload.image_url
        try:
            self.repo.save(category)
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateEntry("Category name already in use", name=name)

        return CategoryOut.model_validate(category)

    def delete_category(self, category_id: int) -> None:
        # integralnosc referencyjna pilnowana tutaj, nie w bazie
        if self.products.exists_in_category(category_id):
            raise BusinessRuleViolation(
                "Category cannot be deleted because at least one product uses it",
                category_id=category_id,
            )

        self.repo.delete(self._get(category_id))
        logger.info(f"Category {category_id} deleted")

    def _get(self, category_id: int) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if not category:
            raise NotFound("Category not found", category_id=category_id)
        return category
