# app/services/notification_service.py
from typing import Any, Dict, List

from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia po zakupie.
    Wysylka idzie przez Celery, checkout nie czeka na wynik.
    """

    @staticmethod
    def send_purchase_notification(user_id: int, items: List[Dict[str, Any]]):
        send_purchase_notification_task.delay(user_id, items)


@celery_app.task(name="app.services.notification_service.send_purchase_notification_task")
def send_purchase_notification_task(user_id: int, items: List[Dict[str, Any]]):
    """
    Celery task - na razie tylko loguje podsumowanie zakupu.
    items: [{product_id, name, quantity, unit_price}]
    """
    units = sum(i["quantity"] for i in items)
    logger.info(f"[NOTIFICATION] User {user_id}: purchase of {units} unit(s) in {len(items)} line(s) completed")

    return {"user_id": user_id, "lines": len(items), "units": units, "status": "sent"}
