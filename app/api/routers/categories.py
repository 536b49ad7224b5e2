# app/api/routers/categories.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.data.database import get_db
from app.domain.errors import ServiceError
from app.domain.schemas import CategoryIn, CategoryOut
from app.services.category_service import CategoryService

router = APIRouter(prefix="/api/categories", tags=["categories"])

staff = require_roles("admin", "operative")


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return CategoryService(db).list_categories()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    try:
        return CategoryService(db).get_category(category_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("", status_code=201)
def create_category(
    payload: CategoryIn,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        category = CategoryService(db).create_category(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Category created", "category": category}


@router.put("/{category_id}")
def update_category(
    category_id: int,
    payload: CategoryIn,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        category = CategoryService(db).update_category(category_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Category updated", "category": category}


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    user: Dict[str, Any] = Depends(staff),
    db: Session = Depends(get_db),
):
    try:
        CategoryService(db).delete_category(category_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Category deleted"}
