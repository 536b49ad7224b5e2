#app/data/models/product.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)

    # zasob wspoldzielony - zmieniany tylko przy checkout
    stock = Column(Integer, nullable=False, default=0)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    is_on_sale = Column(Boolean, nullable=False, default=False)
    sale_price = Column(Numeric(10, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("CategoryModel", lazy="joined")

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),)

    @property
    def effective_price(self):
        """Cena jednostkowa: promocyjna jesli produkt jest w promocji."""
        if self.is_on_sale and self.sale_price is not None:
            return self.sale_price
        return self.price
