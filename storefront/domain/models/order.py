"""Order and OrderItem domain models — map to 'orders' and 'order_items'."""

import enum

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.infrastructure.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    DONE = "DONE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Customer snapshot taken when the order is placed
    customer_name = Column(String(200), nullable=False)
    customer_phone = Column(String(30), nullable=True)
    customer_address = Column(String(500), nullable=True)

    total_price = Column(Integer, nullable=False)
    status = Column(Enum(OrderStatus, name="order_status"), nullable=False, default=OrderStatus.PENDING)
    expired_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order {self.id} {self.status.value if self.status else None}>"


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    # Unit price copied from the product when the line was created
    price = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def __repr__(self):
        return f"<OrderItem order={self.order_id} product={self.product_id} x{self.quantity}>"
