from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.data.models.cart import CartModel
from app.data.models.product import ProductModel
from app.domain.schemas import MAX_DB_INT
from app.domain.errors import (
    BatchValidationError,
    CartEmpty,
    InvalidInput,
    NotFound,
    StockInsufficient,
    TransientConflict,
)
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.notification_service import NotificationService
from app.utils.retry import run_in_transaction
from app.utils.settings import TXN_MAX_ATTEMPTS
from app.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def parse_product_ref(value: Any) -> Optional[int]:
    """Kanoniczna referencja produktu: int w zakresie 1..MAX_DB_INT. Przyjmuje int albo string z cyframi."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 < value <= MAX_DB_INT else None
    if isinstance(value, str) and value.isascii() and value.isdigit():
        ref = int(value)
        return ref if 0 < ref <= MAX_DB_INT else None
    return None


def is_quantity(value: Any, allow_zero: bool = False) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    if value > MAX_DB_INT:
        return False
    return value >= 0 if allow_zero else value > 0


def validate_batch(items: Any, field: str, allow_zero: bool = False) -> Dict[int, int]:
    """
    Walidacja calej paczki {product_id, quantity} - wszystko albo nic.
    Zwraca mape product_id -> quantity (duplikaty: wygrywa ostatni).
    Jesli chociaz jeden element jest zly -> BatchValidationError z lista wszystkich zlych.
    """
    if not isinstance(items, list):
        raise InvalidInput(f"'{field}' must be a list of {{product_id, quantity}} objects", field=field)

    quantity_reason = (
        "quantity must be a non-negative integer" if allow_zero else "quantity must be a positive integer"
    )
    quantities: Dict[int, int] = {}
    invalid: List[Dict[str, Any]] = []

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            reason = "not an object"
        elif parse_product_ref(item.get("product_id")) is None:
            reason = "invalid product reference"
        elif not is_quantity(item.get("quantity"), allow_zero=allow_zero):
            reason = quantity_reason
        else:
            quantities[parse_product_ref(item["product_id"])] = item["quantity"]
            continue
        invalid.append({"index": index, "item_received": item, "reason": reason})

    if invalid:
        raise BatchValidationError(f"Invalid items detected in '{field}'", invalid)

    return quantities


class CartService:
    """
    Silnik koszyka (jeden koszyk na usera).

    commands: merge, add, replace, remove, clear, checkout
    query: get

    Kazda komenda, ktora czyta koszyk i zapisuje wynik, idzie przez
    run_in_transaction: konflikt zapisu -> rollback i ponowienie z tym samym
    inputem. Koszyk ma pole version (optimistic locking), stock zmienia sie
    tylko w checkout warunkowym UPDATE. Join z produktami robimy dopiero po
    commit, w nowej sesji.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        notification_service: NotificationService | None = None,
        max_attempts: int = TXN_MAX_ATTEMPTS,
    ):
        self.session_factory = session_factory
        self.notification_service = notification_service or NotificationService()
        self.max_attempts = max_attempts

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        with self.session_factory() as session:
            repo = CartRepo(session)
            cart = repo.get_cart_by_user(user_id)

            if not cart:
                return self._render(None, user_id, [], {})

            lines = [(i.product_id, i.quantity) for i in repo.get_cart_items(cart.id)]
            products = {
                p.id: p for p in ProductRepo(session).get_products(pid for pid, _ in lines)
            }
            return self._render(cart.id, user_id, lines, products)

    #commands
    def merge_guest_cart(self, user_id: int, guest_items: Any) -> Dict[str, Any]:
        guest = validate_batch(guest_items, field="guest_cart")

        def work(session: Session) -> int:
            repo = CartRepo(session)
            cart = self._load_or_create(repo, user_id)

            merged = {i.product_id: i.quantity for i in repo.get_cart_items(cart.id)}
            # nadpisanie, nie suma - ponowny merge tej samej paczki nie podwaja ilosci
            merged.update(guest)

            self._bump_version(repo, cart)
            repo.replace_items(cart.id, merged)
            return len(merged)

        count = self._transaction(work)
        logger.info(f"Merged {len(guest)} guest item(s) into cart of user {user_id}, {count} line(s) now")

        return self.get_cart(user_id)

    def add_item(self, user_id: int, product_ref: Any, quantity: Any) -> Dict[str, Any]:
        product_id = parse_product_ref(product_ref)
        if product_id is None:
            raise InvalidInput("Invalid product_id", product_id=product_ref)
        if not is_quantity(quantity):
            raise InvalidInput("quantity must be a positive integer", quantity=quantity)

        def work(session: Session) -> int:
            product = ProductRepo(session).get_product(product_id)
            if not product:
                raise NotFound("Product not found", product_id=product_id)

            repo = CartRepo(session)
            cart = self._load_or_create(repo, user_id)
            item = repo.get_cart_item(cart.id, product_id)
            in_cart = item.quantity if item else 0

            # sprawdzenie "doradcze" - stock nie jest tu rezerwowany,
            # wiazace sprawdzenie jest dopiero w checkout
            if in_cart + quantity > product.stock:
                raise StockInsufficient(
                    f"Not enough stock for '{product.name}'. Only {product.stock} units available.",
                    product_id=product_id,
                    product_name=product.name,
                    available=product.stock,
                    requested=quantity,
                    in_cart=in_cart,
                )

            self._bump_version(repo, cart)
            if item:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{in_cart} -> {in_cart + quantity}"
                )
                repo.set_item_quantity(item.id, in_cart + quantity)
            else:
                repo.add_cart_item(cart.id, product_id, quantity)
            return cart.id

        cart_id = self._transaction(work)
        logger.info(f"Product {product_id} x{quantity} added to cart {cart_id}")

        return self.get_cart(user_id)

    def replace_cart(self, user_id: int, items: Any) -> Dict[str, Any]:
        quantities = validate_batch(items, field="products", allow_zero=True)

        def work(session: Session) -> None:
            repo = CartRepo(session)
            cart = self._load_or_create(repo, user_id)
            self._bump_version(repo, cart)
            # zera odpadaja w replace_items
            repo.replace_items(cart.id, quantities)

        self._transaction(work)
        logger.info(f"Cart of user {user_id} replaced with {sum(1 for q in quantities.values() if q)} line(s)")

        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_ref: Any) -> Tuple[Dict[str, Any], bool]:
        """Zwraca (koszyk, czy pozycja zostala usunieta)."""
        product_id = parse_product_ref(product_ref)
        if product_id is None:
            raise InvalidInput("Invalid product_id", product_id=product_ref)

        def work(session: Session) -> bool:
            repo = CartRepo(session)
            cart = repo.get_cart_by_user(user_id)

            #brak koszyka albo pozycji to nie blad
            if not cart:
                return False

            removed = repo.delete_cart_item(cart.id, product_id)
            if removed:
                self._bump_version(repo, cart)
            return bool(removed)

        removed = self._transaction(work)
        if removed:
            logger.info(f"Product {product_id} removed from cart of user {user_id}")
        else:
            logger.info(f"Product {product_id} not in cart of user {user_id}, nothing to remove")

        return self.get_cart(user_id), removed

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        def work(session: Session) -> None:
            repo = CartRepo(session)
            cart = self._load_or_create(repo, user_id)
            self._bump_version(repo, cart)
            repo.clear_items(cart.id)

        self._transaction(work)
        logger.info(f"Cart of user {user_id} cleared")

        return self.get_cart(user_id)

    def checkout(self, user_id: int) -> Dict[str, Any]:
        """
        Symulowany zakup calego koszyka w jednej transakcji:
        1. koszyk istnieje i nie jest pusty
        2. kazdy produkt ma stock >= ilosc (pierwszy brak przerywa wszystko)
        3. warunkowe zmniejszenie stanu kazdego produktu
        4. wyczyszczenie pozycji (dokument koszyka zostaje)
        """

        def work(session: Session) -> List[Dict[str, Any]]:
            carts = CartRepo(session)
            products = ProductRepo(session)

            cart = carts.get_cart_by_user(user_id)
            items = carts.get_cart_items(cart.id) if cart else []
            if not items:
                raise CartEmpty("Your cart is empty")

            catalog = {p.id: p for p in products.get_products(i.product_id for i in items)}

            purchased = []
            for item in items:
                product = catalog.get(item.product_id)
                if product is None:
                    raise NotFound(
                        f"Product {item.product_id} in cart no longer exists",
                        product_id=item.product_id,
                    )
                if product.stock < item.quantity:
                    raise StockInsufficient(
                        f"Insufficient stock for '{product.name}': "
                        f"{product.stock} remaining, cart needs {item.quantity}",
                        product_id=product.id,
                        product_name=product.name,
                        available=product.stock,
                        requested=item.quantity,
                        shortfall=item.quantity - product.stock,
                    )
                purchased.append(
                    {
                        "product_id": product.id,
                        "name": product.name,
                        "quantity": item.quantity,
                        "unit_price": str(product.effective_price),
                    }
                )

            for item in items:
                # 0 rows -> inny checkout zdazyl zmniejszyc stan od naszego odczytu
                if not products.decrement_stock(item.product_id, item.quantity):
                    raise TransientConflict(f"Stock of product {item.product_id} changed during checkout")

            carts.clear_items(cart.id)
            self._bump_version(carts, cart)
            return purchased

        purchased = self._transaction(work)
        logger.info(f"Checkout completed for user {user_id}: {len(purchased)} line(s)")

        self._notify(user_id, purchased)

        return self.get_cart(user_id)

    # =====================================================
    # helpers
    # =====================================================
    def _transaction(self, work: Callable[[Session], T]) -> T:
        return run_in_transaction(self.session_factory, work, self.max_attempts)

    @staticmethod
    def _load_or_create(repo: CartRepo, user_id: int) -> CartModel:
        cart = repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            cart = repo.create_cart(user_id)
        except IntegrityError as e:
            # unique(user_id): rownolegle zapytanie utworzylo koszyk pierwsze
            raise TransientConflict(f"Cart for user {user_id} created concurrently") from e

        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    @staticmethod
    def _bump_version(repo: CartRepo, cart: CartModel) -> None:
        if repo.update_cart_version(cart.id, cart.version) == 0:
            raise TransientConflict(f"Cart {cart.id} was modified by another operation")

    def _notify(self, user_id: int, purchased: List[Dict[str, Any]]) -> None:
        # zakup juz zatwierdzony - blad wysylki tylko logujemy
        try:
            self.notification_service.send_purchase_notification(user_id, purchased)
        except Exception as e:
            logger.warning(f"Purchase notification for user {user_id} not dispatched: {e}")

    @staticmethod
    def _render(
        cart_id: int | None,
        user_id: int,
        lines: List[Tuple[int, int]],
        products: Dict[int, ProductModel],
    ) -> Dict[str, Any]:
        total = Decimal("0.00")
        items = []

        for product_id, quantity in lines:
            product = products.get(product_id)
            subtotal = product.effective_price * quantity if product else Decimal("0.00")
            total += subtotal
            items.append(
                {
                    "product_id": product_id,
                    "quantity": quantity,
                    "product": (
                        {
                            "id": product.id,
                            "name": product.name,
                            "price": product.price,
                            "image": product.image,
                            "stock": product.stock,
                            "is_on_sale": product.is_on_sale,
                            "sale_price": product.sale_price,
                        }
                        if product
                        else None
                    ),
                    "subtotal": subtotal,
                }
            )

        #dict przeksztalcany w jsona
        return {
            "cart_id": cart_id,
            "user_id": user_id,
            "items": items,
            "item_count": sum(q for _, q in lines),
            "total": total,
        }
