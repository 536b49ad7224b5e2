# app/services/product_service.py
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import InvalidInput, NotFound
from app.domain.schemas import ProductBrief, ProductCreate, ProductOut, ProductUpdate
from app.repos.category_repo import CategoryRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


def check_sale_price(is_on_sale: bool, price: Decimal, sale_price: Optional[Decimal]) -> Optional[Decimal]:
    """Cena promocyjna ma sens tylko przy is_on_sale i musi byc nizsza od ceny."""
    if not is_on_sale:
        return None
    if sale_price is None:
        raise InvalidInput("sale_price is required when is_on_sale is true")
    if sale_price >= price:
        raise InvalidInput(
            "sale_price must be lower than price",
            price=str(price),
            sale_price=str(sale_price),
        )
    return sale_price


class ProductService:
    """Katalog: zapytania publiczne + CRUD dla admin/operative."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.categories = CategoryRepo(db)

    # query
    def list_products(self) -> List[ProductOut]:
        return self._out(self.repo.list_products())

    def list_offers(self) -> List[ProductOut]:
        return self._out(self.repo.list_on_sale())

    def search(self, term: str | None) -> List[ProductOut]:
        if not term or not term.strip():
            raise InvalidInput("A search term is required", field="q")
        return self._out(self.repo.search_by_name(term.strip()))

    def by_category_name(self, name: str) -> List[ProductOut]:
        category = self.categories.get_by_name(name.strip())
        if not category:
            return []
        return self._out(self.repo.list_by_category(category.id))

    def latest(self, limit: int = 5) -> List[ProductBrief]:
        return [ProductBrief.model_validate(p) for p in self.repo.latest(limit)]

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get(product_id))

    # commands
    def create_product(self, payload: ProductCreate) -> ProductOut:
        self._require_category(payload.category_id)
        sale_price = check_sale_price(payload.is_on_sale, payload.price, payload.sale_price)

        product = self.repo.add(
            ProductModel(
                name=payload.name,
                price=payload.price,
                image=payload.image_url,
                stock=payload.stock,
                category_id=payload.category_id,
                is_on_sale=payload.is_on_sale,
                sale_price=sale_price,
            )
        )

        logger.info(f"Product {product.id} '{product.name}' created (stock={product.stock})")
        return ProductOut.model_validate(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        product = self._get(product_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("category_id") is not None:
            self._require_category(changes["category_id"])

        # walidacja na stanie po zmianie, nie tylko na polach z requestu
        price = changes.get("price") if changes.get("price") is not None else product.price
        is_on_sale = changes.get("is_on_sale") if changes.get("is_on_sale") is not None else product.is_on_sale
        sale_price = changes["sale_price"] if "sale_price" in changes else product.sale_price
        sale_price = check_sale_price(is_on_sale, price, sale_price)

        for field in ("name", "price", "stock", "category_id"):
            if changes.get(field) is not None:
                setattr(product, field, changes[field])
        if changes.get("image_url") is not None:
            product.image = changes["image_url"]
        product.is_on_sale = is_on_sale
        product.sale_price = sale_price

        self.repo.save(product)
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        self.repo.delete(self._get(product_id))
        logger.info(f"Product {product_id} deleted")

    def _get(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product not found", product_id=product_id)
        return product

    def _require_category(self, category_id: int) -> None:
        if not self.categories.get_category(category_id):
            raise NotFound("Category not found", category_id=category_id)

    @staticmethod
    def _out(products: List[ProductModel]) -> List[ProductOut]:
        return [ProductOut.model_validate(p) for p in products]
