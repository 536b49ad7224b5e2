#app/api/routers/cart.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_current_user
from app.data.database import get_session_factory
from app.domain.errors import ServiceError
from app.domain.schemas import CartEnvelope, CartReplaceIn, GuestCartIn, ItemIn
from app.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(session_factory: sessionmaker) -> CartService:
    return CartService(session_factory=session_factory)


def envelope(cart: Dict[str, Any], message: str | None = None) -> Dict[str, Any]:
    return {"success": True, "message": message, "cart": cart}


@router.get("", response_model=CartEnvelope)
def get_cart(
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    return envelope(svc.get_cart(user["user_id"]))


@router.post("/merge", response_model=CartEnvelope)
def merge_cart(
    payload: GuestCartIn,
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    try:
        return envelope(svc.merge_guest_cart(user["user_id"], payload.guest_cart), "Cart merged")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/add", response_model=CartEnvelope)
def add_item(
    payload: ItemIn,
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    try:
        cart = svc.add_item(user["user_id"], payload.product_id, payload.quantity)
        return envelope(cart, "Product added to cart")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/update", response_model=CartEnvelope)
def replace_cart(
    payload: CartReplaceIn,
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    try:
        return envelope(svc.replace_cart(user["user_id"], payload.products), "Cart updated")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/remove/{product_id}", response_model=CartEnvelope)
def remove_item(
    product_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    try:
        cart, removed = svc.remove_item(user["user_id"], product_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return envelope(cart, "Product removed" if removed else "Product not found in cart, nothing removed")


@router.delete("/clear", response_model=CartEnvelope)
def clear_cart(
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    svc = get_service(session_factory)
    try:
        return envelope(svc.clear_cart(user["user_id"]), "Cart cleared")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/checkout", response_model=CartEnvelope)
def checkout(
    user: Dict[str, Any] = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Symulowany zakup: sprawdza i zmniejsza stan magazynowy, czysci koszyk.
    """
    svc = get_service(session_factory)
    try:
        return envelope(svc.checkout(user["user_id"]), "Purchase completed, your cart has been emptied")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
