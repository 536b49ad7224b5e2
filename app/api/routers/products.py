# app/api/routers/products.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.data.database import get_db
from app.domain.errors import ServiceError
from app.domain.schemas import ProductBrief, ProductCreate, ProductOut, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])

staff = require_roles("admin", "operative")


@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return ProductService(db).list_products()


@router.get("/offers", response_model=List[ProductOut])
def list_offers(db: Session = Depends(get_db)):
    return ProductService(db).list_offers()


@router.get("/search", response_model=List[ProductOut])
def search_products(q: str | None = Query(None), db: Session = Depends(get_db)):
    try:
        return ProductService(db).search(q)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/category/{category_name}", response_model=List[ProductOut])
def products_by_category(category_name: str, db: Session = Depends(get_db)):
    return ProductService(db).by_category_name(category_name)


# musi byc przed /{product_id}
@router.get("/latest/new", response_model=List[ProductBrief])
def latest_products(db: Session = Depends(get_db)):
    return ProductService(db).latest()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("", status_code=201)
def create_product(
    payload: ProductCreate,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        product = ProductService(db).create_product(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Product created", "product": product}


@router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        product = ProductService(db).update_product(product_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Product updated", "product": product}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        ProductService(db).delete_product(product_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Product deleted"}
