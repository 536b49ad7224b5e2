"""
Component tests for the cart API (/api/cart)

Requests go through the FastAPI routes, the bearer-token dependency, the cart
engine and the repositories down to a real SQLite database.
"""
from decimal import Decimal

from fastapi.testclient import TestClient

from app.repos.cart_repo import CartRepo


def lines(body):
    return {i["product_id"]: i["quantity"] for i in body["cart"]["items"]}


class TestAuthentication:
    def test_cart_requires_token(self, client: TestClient):
        response = client.get("/api/cart")

        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "Access denied. No token provided."

    def test_garbage_token_is_rejected(self, client: TestClient):
        response = client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "Invalid token"


class TestGetCart:
    def test_user_without_cart_gets_empty_view(self, client: TestClient, make_user):
        user_id, headers = make_user()

        response = client.get("/api/cart", headers=headers)

        assert response.status_code == 200
        cart = response.json()["cart"]
        assert cart["cart_id"] is None
        assert cart["user_id"] == user_id
        assert cart["items"] == []
        assert cart["item_count"] == 0
        assert Decimal(cart["total"]) == Decimal("0")

    def test_items_carry_product_details_and_totals(self, client: TestClient, make_user, make_product):
        """
        Validates:
        - every line is joined with the current product data
        - sale price is used for subtotals
        - total and item_count are summed over all lines
        """
        # Arrange
        _, headers = make_user()
        mouse = make_product("Mouse", price="25.00", stock=10)
        lamp = make_product("Lamp", price="80.00", stock=10, is_on_sale=True, sale_price="60.00")
        client.post("/api/cart/add", json={"product_id": mouse, "quantity": 2}, headers=headers)
        client.post("/api/cart/add", json={"product_id": lamp, "quantity": 1}, headers=headers)

        # Act
        response = client.get("/api/cart", headers=headers)

        # Assert
        cart = response.json()["cart"]
        by_id = {i["product_id"]: i for i in cart["items"]}
        assert by_id[mouse]["product"]["name"] == "Mouse"
        assert Decimal(by_id[mouse]["subtotal"]) == Decimal("50.00")
        assert Decimal(by_id[lamp]["subtotal"]) == Decimal("60.00")
        assert Decimal(cart["total"]) == Decimal("110.00")
        assert cart["item_count"] == 3


class TestAddItem:
    def test_add_product(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product(stock=5)

        response = client.post("/api/cart/add", json={"product_id": p, "quantity": 2}, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Product added to cart"
        assert lines(body) == {p: 2}

    def test_string_product_id_is_accepted(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product(stock=5)

        response = client.post("/api/cart/add", json={"product_id": str(p), "quantity": 1}, headers=headers)

        assert response.status_code == 200
        assert lines(response.json()) == {p: 1}

    def test_exceeding_stock_returns_400_with_available_units(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product("Chair", stock=3)
        client.post("/api/cart/add", json={"product_id": p, "quantity": 2}, headers=headers)

        response = client.post("/api/cart/add", json={"product_id": p, "quantity": 2}, headers=headers)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["available"] == 3
        assert detail["in_cart"] == 2
        assert "Only 3 units available" in detail["message"]

    def test_unknown_product_returns_404(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post("/api/cart/add", json={"product_id": 9999, "quantity": 1}, headers=headers)

        assert response.status_code == 404

    def test_invalid_quantity_returns_400(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product()

        response = client.post("/api/cart/add", json={"product_id": p, "quantity": 0}, headers=headers)

        assert response.status_code == 400

    def test_missing_fields_fail_request_validation(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post("/api/cart/add", json={"quantity": 1}, headers=headers)

        assert response.status_code == 422


class TestMergeGuestCart:
    def test_merge_overwrites_and_keeps_other_lines(self, client: TestClient, make_user, make_product):
        # Arrange
        _, headers = make_user()
        a, b, c = make_product("A"), make_product("B"), make_product("C")
        client.post("/api/cart/add", json={"product_id": a, "quantity": 1}, headers=headers)
        client.post("/api/cart/add", json={"product_id": b, "quantity": 4}, headers=headers)

        # Act
        response = client.post(
            "/api/cart/merge",
            json={"guest_cart": [{"product_id": b, "quantity": 1}, {"product_id": str(c), "quantity": 2}]},
            headers=headers,
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Cart merged"
        assert lines(response.json()) == {a: 1, b: 1, c: 2}

    def test_invalid_items_are_listed_and_nothing_is_written(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        a = make_product("A")

        response = client.post(
            "/api/cart/merge",
            json={"guest_cart": [{"product_id": a, "quantity": 1}, {"product_id": "x1", "quantity": 1}, 5]},
            headers=headers,
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["invalid_count"] == 2
        assert [i["index"] for i in detail["invalid_items"]] == [1, 2]
        assert detail["invalid_items"][1]["item_received"] == 5
        assert client.get("/api/cart", headers=headers).json()["cart"]["items"] == []

    def test_guest_cart_must_be_a_list(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post("/api/cart/merge", json={"guest_cart": {"product_id": 1}}, headers=headers)

        assert response.status_code == 400

    def test_write_conflicts_exhausting_retries_return_409(
        self, client: TestClient, make_user, make_product, monkeypatch
    ):
        _, headers = make_user()
        a = make_product("A")
        monkeypatch.setattr(CartRepo, "update_cart_version", lambda self, cart_id, old_version: 0)

        response = client.post(
            "/api/cart/merge", json={"guest_cart": [{"product_id": a, "quantity": 1}]}, headers=headers
        )

        assert response.status_code == 409
        assert response.json()["detail"]["retryable"] is True


class TestReplaceRemoveClear:
    def test_update_replaces_whole_cart_and_drops_zeros(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        a, b = make_product("A"), make_product("B")
        client.post("/api/cart/add", json={"product_id": a, "quantity": 3}, headers=headers)

        response = client.post(
            "/api/cart/update",
            json={"products": [{"product_id": a, "quantity": 0}, {"product_id": b, "quantity": 2}]},
            headers=headers,
        )

        assert response.status_code == 200
        assert lines(response.json()) == {b: 2}

    def test_remove_line(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        a, b = make_product("A"), make_product("B")
        client.post("/api/cart/update", json={"products": [{"product_id": a, "quantity": 1}, {"product_id": b, "quantity": 1}]}, headers=headers)

        response = client.delete(f"/api/cart/remove/{a}", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Product removed"
        assert lines(response.json()) == {b: 1}

    def test_remove_line_not_in_cart_says_nothing_was_removed(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        a, b = make_product("A"), make_product("B")
        client.post("/api/cart/add", json={"product_id": a, "quantity": 1}, headers=headers)

        missing_line = client.delete(f"/api/cart/remove/{b}", headers=headers)

        assert missing_line.status_code == 200
        assert missing_line.json()["message"] == "Product not found in cart, nothing removed"
        assert lines(missing_line.json()) == {a: 1}

    def test_remove_without_cart_says_nothing_was_removed(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.delete("/api/cart/remove/5", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Product not found in cart, nothing removed"
        assert response.json()["cart"]["cart_id"] is None

    def test_remove_with_invalid_reference_returns_400(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.delete("/api/cart/remove/abc", headers=headers)

        assert response.status_code == 400

    def test_clear(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        client.post("/api/cart/add", json={"product_id": make_product(), "quantity": 1}, headers=headers)

        response = client.delete("/api/cart/clear", headers=headers)

        assert response.status_code == 200
        assert response.json()["cart"]["items"] == []
        assert response.json()["cart"]["cart_id"] is not None


class TestOutOfRangeInput:
    """
    Product ids and quantities beyond the Integer column range come back as
    400 validation errors, never as a database failure.
    """

    def test_merge_with_oversized_quantity(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post(
            "/api/cart/merge", json={"guest_cart": [{"product_id": 1, "quantity": 10**20}]}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["detail"]["invalid_items"][0]["reason"] == "quantity must be a positive integer"

    def test_replace_with_oversized_reference(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post(
            "/api/cart/update",
            json={"products": [{"product_id": "99999999999999999999", "quantity": 1}]},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["invalid_items"][0]["reason"] == "invalid product reference"

    def test_add_with_oversized_reference_or_quantity(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product()

        by_ref = client.post("/api/cart/add", json={"product_id": 10**20, "quantity": 1}, headers=headers)
        by_qty = client.post("/api/cart/add", json={"product_id": p, "quantity": 10**20}, headers=headers)

        assert by_ref.status_code == 400
        assert by_qty.status_code == 400

    def test_remove_with_oversized_reference_on_existing_cart(self, client: TestClient, make_user, make_product):
        _, headers = make_user()
        p = make_product()
        client.post("/api/cart/add", json={"product_id": p, "quantity": 1}, headers=headers)

        response = client.delete("/api/cart/remove/99999999999999999999", headers=headers)

        assert response.status_code == 400
        assert lines(client.get("/api/cart", headers=headers).json()) == {p: 1}


class TestCheckout:
    def test_checkout_decrements_stock_and_empties_cart(
        self, client: TestClient, make_user, make_product, stock_of
    ):
        # Arrange
        _, headers = make_user()
        p = make_product(stock=5)
        client.post("/api/cart/add", json={"product_id": p, "quantity": 3}, headers=headers)

        # Act
        response = client.post("/api/cart/checkout", headers=headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["cart"]["items"] == []
        assert stock_of(p) == 2

    def test_empty_cart_returns_400(self, client: TestClient, make_user):
        _, headers = make_user()

        response = client.post("/api/cart/checkout", headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Your cart is empty"

    def test_insufficient_stock_names_the_product(
        self, client: TestClient, make_user, make_product, stock_of
    ):
        # two customers both hold 3 of the last 4 units
        _, first = make_user()
        _, second = make_user()
        p = make_product("Monitor", stock=4)
        client.post("/api/cart/add", json={"product_id": p, "quantity": 3}, headers=first)
        client.post("/api/cart/add", json={"product_id": p, "quantity": 3}, headers=second)

        assert client.post("/api/cart/checkout", headers=first).status_code == 200
        response = client.post("/api/cart/checkout", headers=second)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["product_name"] == "Monitor"
        assert detail["available"] == 1
        assert detail["requested"] == 3
        assert stock_of(p) == 1
        assert lines(client.get("/api/cart", headers=second).json()) == {p: 3}
