# campuslink/repos/order_repo.py
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from campuslink.data.models.order import OrderModel, OrderItemModel
from campuslink.data.models.product import ProductModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel, items: list[OrderItemModel]) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        for item in items:
            item.order_id = order.id
            self.db.add(item)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_for_merchant(self, merchant_id: int, status: str | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).where(OrderModel.merchant_id == merchant_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_for_customer(self, customer_user_id: int, status: str | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).where(OrderModel.customer_user_id == customer_user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def status_totals(
        self, merchant_id: int | None = None, customer_user_id: int | None = None
    ) -> list[tuple[str, int, object]]:
        """SELECT status, count(*), sum(total_amount) ... GROUP BY status"""
        stmt = select(OrderModel.status, func.count(OrderModel.id), func.sum(OrderModel.total_amount))
        if merchant_id is not None:
            stmt = stmt.where(OrderModel.merchant_id == merchant_id)
        if customer_user_id is not None:
            stmt = stmt.where(OrderModel.customer_user_id == customer_user_id)
        stmt = stmt.group_by(OrderModel.status)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def get_products(self, merchant_id: int, product_ids: list[int]) -> dict[int, ProductModel]:
        stmt = select(ProductModel).where(
            ProductModel.merchant_id == merchant_id,
            ProductModel.id.in_(product_ids),
        )
        return {p.id: p for p in self.db.execute(stmt).scalars().all()}

    def update_status(self, order_id: int, expected_status: str, new_status: str, now: datetime) -> int:
        """
        Warunkowy update na oczekiwanym statusie, tak jak optimistic locking na wersji:
        UPDATE orders SET status = :new WHERE id = :id AND status = :expected
        """
        stmt = (
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == expected_status,
            )
            .values(status=new_status, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
