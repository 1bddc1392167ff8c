"""Order service — order lifecycle with stock reservation.

Every mutating operation runs inside the unit of work's transaction. Product
rows are loaded row-locked, stock only moves through conditional updates,
and any failure rolls back every write of the operation.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from storefront.config import get_settings
from storefront.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.models.order import Order, OrderItem, OrderStatus
from storefront.domain.models.product import Product
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.schemas.auth import Principal
from storefront.domain.schemas.order import (
    OrderCreated,
    OrderDeleted,
    OrderItemIn,
    OrderItemRead,
    OrderRead,
    OrderStatusChange,
)

settings = get_settings()
logger = structlog.get_logger(__name__)

TERMINAL_STATUS_MESSAGES = {
    OrderStatus.CANCELLED: "Pesanan sudah dibatalkan",
    OrderStatus.DONE: "Pesanan sudah diselesaikan",
}


def _index(products: Iterable[Product]) -> Dict[int, Product]:
    return {product.id: product for product in products}


def _check_items(items: Sequence[OrderItemIn]) -> None:
    seen = set()
    for item in items:
        if item.quantity <= 0:
            raise ValidationError(
                f"Jumlah produk dengan ID {item.product_id} harus lebih dari 0"
            )
        if item.product_id in seen:
            raise ValidationError(
                f"Produk dengan ID {item.product_id} tercantum lebih dari sekali"
            )
        seen.add(item.product_id)


def _load_products(uow: UnitOfWork, product_ids: Sequence[int]) -> Dict[int, Product]:
    products = _index(uow.products.get_many(product_ids, for_update=True))
    for product_id in product_ids:
        if product_id not in products:
            raise ValidationError(f"Produk dengan ID {product_id} tidak ditemukan")
    return products


def _insufficient_stock(product: Product) -> ValidationError:
    return ValidationError(
        f"Stok tidak mencukupi untuk produk {product.name}",
        details={"productId": product.id, "stock": product.stock},
    )


def _reserve(uow: UnitOfWork, product: Product, quantity: int) -> None:
    # Re-checked by the store; a concurrent order may have taken the stock
    if not uow.products.reserve_stock(product.id, quantity):
        raise _insufficient_stock(product)


def _get_mutable_order(
    uow: UnitOfWork, order_id: int, principal: Principal, action: str = "mengubah"
) -> Order:
    order = uow.orders.get_for_update(order_id)
    if order is None:
        raise NotFoundError(f"Pesanan dengan ID {order_id} tidak ditemukan")
    if order.user_id != principal.user_id:
        raise AuthorizationError(f"Anda tidak memiliki hak untuk {action} pesanan ini")
    if order.status.is_terminal:
        raise ConflictError(
            TERMINAL_STATUS_MESSAGES[order.status],
            details={"status": order.status.value},
        )
    return order


def _to_order_read(order: Order, products: Dict[int, Product]) -> OrderRead:
    order_items = []
    for item in order.items:
        product: Optional[Product] = products.get(item.product_id)
        order_items.append(
            OrderItemRead(
                product_id=item.product_id,
                product_name=product.name if product else None,
                product_price=product.price if product else None,
                quantity=item.quantity,
                price=item.price,
                total_price=item.line_total,
            )
        )
    return OrderRead(
        id=order.id,
        user_id=order.user_id,
        total_price=order.total_price,
        status=order.status,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_address=order.customer_address,
        expired_at=order.expired_at,
        order_items=order_items,
    )


def _summaries(uow: UnitOfWork, orders: List[Order]) -> List[OrderRead]:
    product_ids = {item.product_id for order in orders for item in order.items}
    products = _index(uow.products.get_many(product_ids))
    return [_to_order_read(order, products) for order in orders]


def create_order(
    uow: UnitOfWork,
    principal: Principal,
    items: Sequence[OrderItemIn],
    total_price: int,
) -> OrderCreated:
    """Place an order for `principal`, reserving stock for every line."""
    if not items or not total_price or total_price <= 0:
        raise ValidationError(
            "Item pesanan tidak boleh kosong dan harus memiliki total harga"
        )
    if not principal.name:
        raise ValidationError("Data pengguna tidak lengkap")
    _check_items(items)

    with uow:
        products = _load_products(uow, [item.product_id for item in items])

        for item in items:
            if products[item.product_id].stock < item.quantity:
                raise _insufficient_stock(products[item.product_id])

        expected_total = sum(products[item.product_id].price * item.quantity for item in items)
        if expected_total != total_price:
            raise ValidationError(
                "Total harga tidak sesuai dengan harga produk",
                details={"expectedTotalPrice": expected_total, "totalPrice": total_price},
            )

        expired_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ORDER_EXPIRATION_MINUTES)
        order = uow.orders.add(
            Order(
                user_id=principal.user_id,
                customer_name=principal.name,
                customer_phone=principal.phone_number,
                customer_address=principal.address,
                total_price=expected_total,
                status=OrderStatus.PENDING,
                expired_at=expired_at,
            )
        )

        for item in items:
            product = products[item.product_id]
            uow.orders.add_item(
                order,
                OrderItem(product_id=product.id, quantity=item.quantity, price=product.price),
            )
            _reserve(uow, product, item.quantity)

    logger.info(
        "order.created",
        order_id=order.id,
        user_id=principal.user_id,
        items=len(items),
        total_price=expected_total,
    )
    return OrderCreated(order_id=order.id, expired_time=expired_at)


def get_user_orders(uow: UnitOfWork, principal: Principal) -> List[OrderRead]:
    orders = uow.orders.list_by_user(principal.user_id)
    if not orders:
        raise NotFoundError("Tidak ada pesanan ditemukan untuk pengguna ini")
    return _summaries(uow, orders)


def get_order_by_id(uow: UnitOfWork, order_id: int, principal: Principal) -> OrderRead:
    """Fetch one order. Only its owner or an admin may read it."""
    order = uow.orders.get_by_id(order_id)
    if order is None:
        raise NotFoundError(f"Pesanan dengan ID {order_id} tidak ditemukan")
    if order.user_id != principal.user_id and not principal.is_admin:
        raise AuthorizationError("Anda tidak memiliki hak untuk melihat pesanan ini")
    return _summaries(uow, [order])[0]


def update_order_status(
    uow: UnitOfWork,
    order_id: int,
    principal: Principal,
    new_status: OrderStatus,
) -> OrderStatusChange:
    """Move a pending order to DONE or CANCELLED.

    Cancelling gives every reserved unit back to its product.
    """
    if new_status is OrderStatus.PENDING:
        raise ValidationError("Status pesanan tidak valid")

    with uow:
        order = _get_mutable_order(uow, order_id, principal)
        previous_status = order.status

        if new_status is OrderStatus.CANCELLED:
            for item in order.items:
                uow.products.release_stock(item.product_id, item.quantity)

        uow.orders.update(order, {"status": new_status})

    logger.info(
        "order.status_changed",
        order_id=order.id,
        previous_status=previous_status.value,
        new_status=new_status.value,
    )
    return OrderStatusChange(
        order_id=order.id, previous_status=previous_status, new_status=new_status
    )


def update_order_data(
    uow: UnitOfWork,
    order_id: int,
    principal: Principal,
    items: Optional[Sequence[OrderItemIn]],
) -> OrderRead:
    """Set quantities on a pending order and recompute its total.

    Existing lines move stock by the quantity delta, new lines reserve their
    full quantity at the product's current price. Lines not mentioned are
    kept as they are.
    """
    items = items or []
    _check_items(items)

    with uow:
        order = _get_mutable_order(uow, order_id, principal)
        existing = {item.product_id: item for item in order.items}
        products = _load_products(uow, [item.product_id for item in items])

        # Validate every line before touching stock
        for item in items:
            current = existing.get(item.product_id)
            needed = item.quantity - (current.quantity if current else 0)
            if needed > products[item.product_id].stock:
                raise _insufficient_stock(products[item.product_id])

        for item in items:
            product = products[item.product_id]
            current = existing.get(item.product_id)
            if current is None:
                uow.orders.add_item(
                    order,
                    OrderItem(product_id=product.id, quantity=item.quantity, price=product.price),
                )
                _reserve(uow, product, item.quantity)
                continue

            delta = item.quantity - current.quantity
            if delta > 0:
                _reserve(uow, product, delta)
            elif delta < 0:
                uow.products.release_stock(product.id, -delta)
            current.quantity = item.quantity

        new_total = sum(line.line_total for line in order.items)
        uow.orders.update(order, {"total_price": new_total})
        result = _summaries(uow, [order])[0]

    logger.info("order.updated", order_id=order.id, items=len(items), total_price=new_total)
    return result


def delete_order(uow: UnitOfWork, order_id: int, principal: Principal) -> OrderDeleted:
    """Delete a pending order, returning every reserved unit to stock."""
    with uow:
        order = _get_mutable_order(uow, order_id, principal, action="menghapus")
        for item in list(order.items):
            uow.orders.remove_item(order, item)
            uow.products.release_stock(item.product_id, item.quantity)
        uow.orders.delete(order.id)

    logger.info("order.deleted", order_id=order_id, user_id=principal.user_id)
    return OrderDeleted(order_id=order_id)
