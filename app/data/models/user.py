from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.data.database import Base

ROLES = ("admin", "operative", "customer")


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False, default="customer")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
