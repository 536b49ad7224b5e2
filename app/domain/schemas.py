# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Any, List, Literal, Optional
from decimal import Decimal
from datetime import datetime

Role = Literal["admin", "operative", "customer"]

# kolumny Integer (postgres int4)
MAX_DB_INT = 2**31 - 1


# =====================================================
# CART
# =====================================================
class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    # walidacja referencji/ilosci w CartService (raw), zeby bledy mialy jeden format
    product_id: Any = Field(..., description="ID produktu")
    quantity: Any = Field(..., description="Ilosc produktu (> 0)")


class GuestCartIn(BaseModel):
    """Koszyk goscia do scalenia z koszykiem usera."""

    guest_cart: Any = Field(..., description="Lista {product_id, quantity}")


class CartReplaceIn(BaseModel):
    products: Any = Field(..., description="Pelna lista {product_id, quantity}; quantity 0 usuwa pozycje")


class ProductSnapshot(BaseModel):
    id: int
    name: str
    price: Decimal
    image: Optional[str] = None
    stock: int
    is_on_sale: bool
    sale_price: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    product: Optional[ProductSnapshot] = None
    subtotal: Decimal


class CartOut(BaseModel):
    cart_id: Optional[int] = None
    user_id: int
    items: List[CartItemOut]
    item_count: int
    total: Decimal


class CartEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    cart: CartOut


# =====================================================
# CATALOG
# =====================================================
class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    image_url: str = Field(..., min_length=1, max_length=500)


class CategoryOut(BaseModel):
    id: int
    name: str
    image_url: str

    model_config = ConfigDict(from_attributes=True)


class CategoryRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    image_url: str = Field(..., min_length=1, max_length=500)
    stock: int = Field(0, ge=0, le=MAX_DB_INT)
    category_id: int = Field(..., gt=0, le=MAX_DB_INT)
    is_on_sale: bool = False
    sale_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class ProductUpdate(BaseModel):
    """Partial update - pola None nie sa zmieniane."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, min_length=1, max_length=500)
    stock: Optional[int] = Field(None, ge=0, le=MAX_DB_INT)
    category_id: Optional[int] = Field(None, gt=0, le=MAX_DB_INT)
    is_on_sale: Optional[bool] = None
    sale_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    image: Optional[str] = None
    stock: int
    is_on_sale: bool
    sale_price: Optional[Decimal] = None
    category: Optional[CategoryRef] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductBrief(BaseModel):
    id: int
    name: str
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# USERS / AUTH
# =====================================================
class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # bcrypt bierze max 72 bajty
    password: str = Field(..., min_length=6, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # walidacja roli w serwisie (400, nie 422)
    role: str


class UserRead(BaseModel):
    """Uzytkownik bez hasla (response)."""

    id: int
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class AuthOut(BaseModel):
    success: bool = True
    message: str
    token: str
    user: UserRead
