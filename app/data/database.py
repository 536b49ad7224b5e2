# app/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.utils.settings import DATABASE_URL

Base = declarative_base()


def make_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # sqlite + threadpool FastAPI
        connect_args = {"check_same_thread": False, "timeout": 5}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Dla serwisow, ktore same otwieraja transakcje (koszyk)."""
    return SessionLocal
