# app/repos/cart_repo.py
from typing import Dict, List

from sqlalchemy import select, update, delete, insert
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    """
    Dostep do koszykow. Nie robi commit - granica transakcji jest w serwisie
    (run_in_transaction), repo tylko wykonuje zapytania w przekazanej sesji.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, user_id: int) -> CartModel:
        cart = CartModel(user_id=user_id, version=1)
        self.db.add(cart)
        # flush -> INSERT teraz, zeby kolizja unique(user_id) wyszla tutaj
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, cart_id: int, product_id: int, quantity: int) -> None:
        self.db.execute(
            insert(CartItemModel).values(cart_id=cart_id, product_id=product_id, quantity=quantity)
        )

    def set_item_quantity(self, item_id: int, quantity: int) -> None:
        self.db.execute(
            update(CartItemModel).where(CartItemModel.id == item_id).values(quantity=quantity)
        )

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def clear_items(self, cart_id: int) -> None:
        self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))

    def replace_items(self, cart_id: int, quantities: Dict[int, int]) -> None:
        """Caly zestaw pozycji na raz: delete + insert (bez zer)."""
        self.clear_items(cart_id)
        rows = [
            {"cart_id": cart_id, "product_id": pid, "quantity": qty}
            for pid, qty in quantities.items()
            if qty > 0
        ]
        if rows:
            self.db.execute(insert(CartItemModel), rows)

    def update_cart_version(self, cart_id: int, old_version: int) -> int:
        """
        Optimistic locking:
        UPDATE carts SET version = old + 1 WHERE id = :id AND version = :old
        0 rows -> ktos inny zmienil koszyk od naszego odczytu.
        """
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(version=old_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
