# app/repos/product_repo.py
from typing import Iterable, List

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.data.models.category import CategoryModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids: Iterable[int]) -> List[ProductModel]:
        ids = list(product_ids)
        if not ids:
            return []
        return list(self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars().unique())

    def list_products(self) -> List[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars().unique())

    def list_on_sale(self) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel).where(ProductModel.is_on_sale.is_(True)).order_by(ProductModel.id)
            ).scalars().unique()
        )

    def search_by_name(self, term: str) -> List[ProductModel]:
        # LIKE jest case-sensitive na postgresie, dlatego lower() po obu stronach
        pattern = f"%{term.lower()}%"
        return list(
            self.db.execute(
                select(ProductModel).where(func.lower(ProductModel.name).like(pattern)).order_by(ProductModel.id)
            ).scalars().unique()
        )

    def list_by_category(self, category_id: int) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel).where(ProductModel.category_id == category_id).order_by(ProductModel.id)
            ).scalars().unique()
        )

    def latest(self, limit: int = 5) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel).order_by(ProductModel.created_at.desc(), ProductModel.id.desc()).limit(limit)
            ).scalars().unique()
        )

    def exists_in_category(self, category_id: int) -> bool:
        return (
            self.db.execute(
                select(ProductModel.id).where(ProductModel.category_id == category_id).limit(1)
            ).first()
            is not None
        )

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Warunkowy update - stan nigdy nie schodzi ponizej zera:
        UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q
        False -> ktos wykupil w miedzyczasie.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
