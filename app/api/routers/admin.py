# app/api/routers/admin.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.data.database import get_db
from app.domain.errors import ServiceError
from app.domain.schemas import UserRegister, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/api/admin", tags=["admin"])

admin_only = require_roles("admin")


@router.post("/users/create-operative", status_code=201)
def create_operative(
    payload: UserRegister,
    admin: Dict[str, Any] = Depends(admin_only),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        user = service.create_operative(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Operative user created", "user": user}


@router.get("/users/operatives")
def list_operatives(
    admin: Dict[str, Any] = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return {"success": True, "users": UserService(db).list_operatives()}


@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    admin: Dict[str, Any] = Depends(admin_only),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        return {"success": True, "user": service.get_user(user_id)}
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/users/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    admin: Dict[str, Any] = Depends(admin_only),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        user = service.update_user(admin["user_id"], user_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "User updated", "user": user}


@router.delete("/users/operative/{user_id}")
def delete_operative(
    user_id: int,
    admin: Dict[str, Any] = Depends(admin_only),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        service.delete_operative(admin["user_id"], user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True, "message": "Operative user deleted"}
