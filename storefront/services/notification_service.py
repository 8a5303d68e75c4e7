# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Zdarzenia zamowien (utworzenie, zmiana statusu) wrzucane do kolejki celery."""

    @staticmethod
    def send_order_notification(user_id: str, order_number: str, status: str):
        send_order_notification_task.delay(user_id, order_number, status)


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: str, order_number: str, status: str):
    # kanal dostarczenia (email, push) poza tym serwisem, tu tylko log zdarzenia
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} is {status}")

    return {"user_id": user_id, "order_number": order_number, "status": status, "sent": True}
