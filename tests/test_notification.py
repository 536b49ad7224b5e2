"""
Purchase notification task (runs eagerly in tests).
"""
from unittest.mock import Mock

from app.services import notification_service
from app.services.notification_service import NotificationService, send_purchase_notification_task

ITEMS = [
    {"product_id": 1, "name": "Mouse", "quantity": 2, "unit_price": "20.00"},
    {"product_id": 2, "name": "Lamp", "quantity": 1, "unit_price": "60.00"},
]


def test_task_summarises_purchase():
    result = send_purchase_notification_task.apply(args=(7, ITEMS)).get()

    assert result == {"user_id": 7, "lines": 2, "units": 3, "status": "sent"}


def test_service_dispatches_task(monkeypatch):
    task = Mock()
    monkeypatch.setattr(notification_service, "send_purchase_notification_task", task)

    NotificationService().send_purchase_notification(7, ITEMS)

    task.delay.assert_called_once_with(7, ITEMS)
