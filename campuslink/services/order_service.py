# campuslink/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable

from sqlalchemy.orm import Session

from campuslink.data.models.merchant import MerchantModel
from campuslink.data.models.order import OrderModel, OrderItemModel
from campuslink.domain.errors import (
    Conflict,
    IllegalTransition,
    IncompleteContactInfo,
    InvalidInput,
    InvalidQuantity,
    NotFound,
    PermissionDenied,
)
from campuslink.domain.order_status import OrderStatus, can_transition, is_terminal, next_statuses
from campuslink.repos.order_repo import OrderRepo
from campuslink.services.handoff_service import ContactInfo
from campuslink.services.notification_service import NotificationService
from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value: str | OrderStatus) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidInput(f"Unknown order status: {value!r}") from None


class OrderService:
    """
    Serwis domeny zamowien.

    Zamowienie wprowadza recznie sprzedawca po otrzymaniu wiadomosci WhatsApp,
    klik "wyslij" po stronie klienta nie daje zadnego potwierdzenia dostarczenia.
    Status zmienia tylko sprzedawca, wlasciciel zamowienia, wg grafu w domain/order_status.py.
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repo = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.clock = clock

    def create_order(
        self,
        merchant: MerchantModel,
        contact: ContactInfo,
        items: Iterable[tuple[int, int]],
        customer_user_id: int | None = None,
        notes: str | None = None,
    ) -> OrderModel:
        """
        Use Case: reczne utworzenie zamowienia przez sprzedawce.

        items: pary (product_id, quantity) z produktow tego sprzedawcy.
        Nazwa i cena sa zamrazane w order_items, pozniejsze zmiany produktu ich nie dotykaja.
        """
        items = list(items)
        if not items:
            raise InvalidInput("Order must contain at least one item")
        if not contact.is_complete():
            raise IncompleteContactInfo()
        for _, quantity in items:
            if quantity < 1:
                raise InvalidQuantity()

        products = self.repo.get_products(merchant.id, [pid for pid, _ in items])

        snapshots = []
        for product_id, quantity in items:
            product = products.get(product_id)
            if product is None:
                raise NotFound(f"Product {product_id} not found for merchant {merchant.id}")
            price = Decimal(product.price)
            snapshots.append(
                OrderItemModel(
                    product_id=product.id,
                    product_name=product.name,
                    product_price=price,
                    quantity=quantity,
                    subtotal=price * quantity,
                )
            )

        total = sum((s.subtotal for s in snapshots), Decimal("0.00"))
        now = self.clock()

        order = self.repo.create_order(
            OrderModel(
                merchant_id=merchant.id,
                customer_user_id=customer_user_id,
                status=OrderStatus.PENDING.value,
                total_amount=total,
                first_name=contact.first_name.strip(),
                last_name=contact.last_name.strip(),
                delivery_location=contact.location.strip(),
                delivery_phone=contact.phone.strip(),
                notes=notes,
                created_at=now,
                updated_at=now,
            ),
            snapshots,
        )

        logger.info(f"Order {order.id} created by merchant {merchant.id}, total {total}")
        return order

    def get_order(self, order_id: int, user_id: int, merchant: MerchantModel | None = None) -> OrderModel:
        """
        Use Case: Pobranie zamowienia (Query).
        Widzi je sprzedawca-wlasciciel albo klient przypisany do zamowienia.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound(f"Order {order_id} not found")

        is_owner = merchant is not None and order.merchant_id == merchant.id
        if not is_owner and order.customer_user_id != user_id:
            raise PermissionDenied("No access to this order")

        return order

    def list_orders(self, merchant: MerchantModel, status: str | None = None) -> list[OrderModel]:
        if status is not None:
            status = parse_status(status).value
        return self.repo.list_for_merchant(merchant.id, status)

    def list_customer_orders(self, user_id: int, status: str | None = None) -> list[OrderModel]:
        """Zamowienia, w ktorych uzytkownik jest klientem (Query)."""
        if status is not None:
            status = parse_status(status).value
        return self.repo.list_for_customer(user_id, status)

    def merchant_stats(self, merchant: MerchantModel) -> Dict[str, Any]:
        return self._stats(self.repo.status_totals(merchant_id=merchant.id))

    def customer_stats(self, user_id: int) -> Dict[str, Any]:
        return self._stats(self.repo.status_totals(customer_user_id=user_id))

    def allowed_transitions(self, order_id: int, merchant: MerchantModel) -> list[OrderStatus]:
        order = self._owned_order(order_id, merchant)
        return next_statuses(OrderStatus(order.status))

    def transition(self, order_id: int, new_status: str | OrderStatus, merchant: MerchantModel) -> OrderModel:
        """
        Use Case: zmiana statusu (Command).

        - tylko sprzedawca-wlasciciel
        - tylko krawedzie z TRANSITIONS, bez przeskakiwania i cofania
        - ten sam status = no-op, zwraca zamowienie bez zmian,
          rowniez dla stanow koncowych (completed -> completed to 200, nie 409)
        - warunkowy update na aktualnym statusie, rowcount 0 = Conflict
        """
        target = parse_status(new_status)
        order = self._owned_order(order_id, merchant)
        current = OrderStatus(order.status)

        if target == current:
            logger.info(f"Order {order.id} already {current.value}, no-op")
            return order

        if is_terminal(current) or not can_transition(current, target):
            logger.warning(
                f"Rejected transition of order {order.id}: {current.value} -> {target.value}"
            )
            raise IllegalTransition(
                f"Cannot move order from {current.value} to {target.value}"
            )

        rowcount = self.repo.update_status(order.id, current.value, target.value, self.clock())
        if rowcount == 0:
            self.repo.rollback()
            raise Conflict("Order status was changed by another session")

        self.repo.commit()
        order = self.repo.refresh(order)

        logger.info(f"Order {order.id}: {current.value} -> {target.value}")

        self.notification_service.send_order_status_notification(
            order.customer_user_id, order.id, target.value
        )
        return order

    @staticmethod
    def _stats(rows) -> Dict[str, Any]:
        """
        Liczniki per status z jednego GROUP BY.
        total_amount pomija anulowane, revenue liczy tylko zakonczone.
        """
        by_status = {status.value: 0 for status in OrderStatus}
        sums = {}
        for status, count, amount in rows:
            by_status[status] = count
            sums[status] = Decimal(str(amount or 0))

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "total_amount": sum(
                (v for s, v in sums.items() if s != OrderStatus.CANCELLED.value), Decimal("0.00")
            ),
            "revenue": sums.get(OrderStatus.COMPLETED.value, Decimal("0.00")),
        }

    def _owned_order(self, order_id: int, merchant: MerchantModel) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        if order.merchant_id != merchant.id:
            raise PermissionDenied("Only the owning merchant may change this order")
        return order
