from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from campuslink.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    merchant_id = Column(Integer, ForeignKey("merchants.id"), nullable=False, index=True)
    customer_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    status = Column(String, nullable=False, default="pending")  # patrz domain/order_status.py
    total_amount = Column(Numeric(10, 2), nullable=False)

    # dane kontaktowe z wiadomosci WhatsApp
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    delivery_location = Column(String, nullable=False)
    delivery_phone = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
    )


class OrderItemModel(Base):
    """Snapshot of a product at order time. Never updated after insert."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=True)  # tylko informacyjnie, bez FK

    product_name = Column(String, nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
