# app/data/seed.py
from app.data.database import SessionLocal
from app.domain.errors import DuplicateEntry
from app.services.user_service import UserService
from app.utils.settings import ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD
from app.utils.logging import get_logger

logger = get_logger(__name__)


def seed(session_factory=SessionLocal):
    """Pierwszy admin z ADMIN_EMAIL/ADMIN_PASSWORD - tylko jesli nie ma zadnego admina."""
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return

    db = session_factory()
    try:
        if UserService(db).ensure_admin(ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD):
            logger.info(f"Seeded admin user {ADMIN_EMAIL}")
    except DuplicateEntry:
        logger.warning(f"Cannot seed admin: {ADMIN_EMAIL} already belongs to a non-admin user")
    finally:
        db.close()
