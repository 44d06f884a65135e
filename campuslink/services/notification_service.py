# campuslink/services/notification_service.py
from campuslink.celery_worker import celery_app
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_status_notification(customer_user_id: int | None, order_id: int, status: str):
        """
        Powiadomienie klienta o zmianie statusu zamówienia.
        Zamowienia bez przypisanego klienta sa pomijane.
        """
        if customer_user_id is None:
            return
        send_order_status_notification_task.delay(customer_user_id, order_id, status)


@celery_app.task(name="campuslink.services.notification_service.send_order_status_notification_task")
def send_order_status_notification_task(customer_user_id: int, order_id: int, status: str):
    """
    Celery task - tylko loguje, brak kanalu push do klienta.
    """
    logger.info(f"[NOTIFICATION] User {customer_user_id}: Order {order_id} is now {status}")

    return {"user_id": customer_user_id, "order_id": order_id, "status": status}
