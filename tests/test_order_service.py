"""Tests for the order lifecycle against the in-memory unit of work."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.application.services import order_service
from storefront.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.models.order import OrderStatus
from storefront.domain.schemas.order import OrderItemIn


def items(*pairs):
    return [OrderItemIn(product_id=pid, quantity=qty) for pid, qty in pairs]


@pytest.fixture
def placed_order(uow, principal, add_product):
    """Product 1 (stock 5, price 10) with an order for 2 units."""
    add_product(price=10, stock=5)
    created = order_service.create_order(uow, principal, items((1, 2)), 20)
    return uow.orders.get_by_id(created.order_id)


class TestCreateOrder:
    def test_reserves_stock_and_prices_lines(self, uow, principal, add_product):
        product = add_product(price=10, stock=5)

        created = order_service.create_order(uow, principal, items((1, 2)), 20)

        order = uow.orders.get_by_id(created.order_id)
        assert order.status is OrderStatus.PENDING
        assert order.total_price == 20
        assert [(i.product_id, i.quantity, i.price) for i in order.items] == [(1, 2, 10)]
        assert product.stock == 3
        assert uow.commits == 1

    def test_total_matches_sum_of_lines(self, uow, principal, add_product):
        add_product(name="Kopi", price=10, stock=5)
        add_product(name="Teh", price=7, stock=9)

        created = order_service.create_order(uow, principal, items((1, 3), (2, 4)), 58)

        order = uow.orders.get_by_id(created.order_id)
        assert sum(i.price * i.quantity for i in order.items) == order.total_price == 58
        assert uow.products.get_by_id(1).stock == 2
        assert uow.products.get_by_id(2).stock == 5

    def test_expires_in_one_hour(self, uow, principal, add_product):
        add_product()
        before = datetime.now(timezone.utc)

        created = order_service.create_order(uow, principal, items((1, 1)), 10)

        assert before + timedelta(minutes=59) < created.expired_time
        assert created.expired_time <= datetime.now(timezone.utc) + timedelta(hours=1)

    def test_snapshots_customer(self, uow, principal, add_product):
        add_product()
        created = order_service.create_order(uow, principal, items((1, 1)), 10)

        order = uow.orders.get_by_id(created.order_id)
        assert order.user_id == principal.user_id
        assert order.customer_name == "Budi Santoso"
        assert order.customer_phone == principal.phone_number
        assert order.customer_address == principal.address

    def test_insufficient_stock_changes_nothing(self, uow, principal, add_product):
        add_product(name="Kopi", price=10, stock=5)
        add_product(name="Teh", price=7, stock=1)

        with pytest.raises(ValidationError, match="Stok tidak mencukupi untuk produk Teh"):
            order_service.create_order(uow, principal, items((1, 2), (2, 3)), 41)

        assert uow.products.get_by_id(1).stock == 5
        assert uow.products.get_by_id(2).stock == 1
        assert uow.orders.items == {}

    def test_failed_reservation_rolls_back_earlier_lines(self, uow, principal, add_product, monkeypatch):
        add_product(name="Kopi", price=10, stock=5)
        add_product(name="Teh", price=7, stock=5)

        # Another buyer takes the Teh stock between the check and the update
        original = uow.products.reserve_stock

        def racing_reserve(product_id, quantity):
            if product_id == 2:
                uow.products.get_by_id(2).stock = 0
            return original(product_id, quantity)

        monkeypatch.setattr(uow.products, "reserve_stock", racing_reserve)

        with pytest.raises(ValidationError):
            order_service.create_order(uow, principal, items((1, 2), (2, 1)), 27)

        assert uow.products.get_by_id(1).stock == 5
        assert uow.orders.items == {}
        assert uow.rollbacks == 1

    def test_unknown_product(self, uow, principal, add_product):
        add_product()
        with pytest.raises(ValidationError, match="Produk dengan ID 42 tidak ditemukan"):
            order_service.create_order(uow, principal, items((1, 1), (42, 1)), 20)
        assert uow.products.get_by_id(1).stock == 5

    @pytest.mark.parametrize("order_items,total", [([], 10), ([(1, 1)], 0)])
    def test_requires_items_and_total(self, uow, principal, add_product, order_items, total):
        add_product()
        with pytest.raises(ValidationError, match="tidak boleh kosong"):
            order_service.create_order(uow, principal, items(*order_items), total)

    def test_rejects_duplicate_products(self, uow, principal, add_product):
        add_product()
        with pytest.raises(ValidationError, match="lebih dari sekali"):
            order_service.create_order(uow, principal, items((1, 1), (1, 2)), 30)

    def test_rejects_total_mismatch(self, uow, principal, add_product):
        add_product(price=10)
        with pytest.raises(ValidationError) as excinfo:
            order_service.create_order(uow, principal, items((1, 2)), 25)
        assert excinfo.value.details["expectedTotalPrice"] == 20
        assert uow.products.get_by_id(1).stock == 5

    def test_requires_customer_name(self, uow, principal, add_product):
        add_product()
        nameless = principal.model_copy(update={"name": ""})
        with pytest.raises(ValidationError, match="Data pengguna tidak lengkap"):
            order_service.create_order(uow, nameless, items((1, 1)), 10)


class TestReadOrders:
    def test_user_orders_include_product_summary(self, uow, principal, placed_order):
        orders = order_service.get_user_orders(uow, principal)

        assert len(orders) == 1
        line = orders[0].order_items[0]
        assert line.product_name == "Kopi Gayo"
        assert line.product_price == 10
        assert line.quantity == 2
        assert line.total_price == 20

    def test_user_without_orders(self, uow, other_principal, placed_order):
        with pytest.raises(NotFoundError):
            order_service.get_user_orders(uow, other_principal)

    def test_get_by_id(self, uow, principal, placed_order):
        order = order_service.get_order_by_id(uow, placed_order.id, principal)
        assert order.id == placed_order.id
        assert order.status is OrderStatus.PENDING

    def test_get_by_id_missing(self, uow, principal):
        with pytest.raises(NotFoundError, match="Pesanan dengan ID 7 tidak ditemukan"):
            order_service.get_order_by_id(uow, 7, principal)

    def test_get_by_id_other_user(self, uow, other_principal, placed_order):
        with pytest.raises(AuthorizationError):
            order_service.get_order_by_id(uow, placed_order.id, other_principal)

    def test_get_by_id_admin(self, uow, admin_principal, placed_order):
        order = order_service.get_order_by_id(uow, placed_order.id, admin_principal)
        assert order.user_id == placed_order.user_id


class TestUpdateStatus:
    def test_pay(self, uow, principal, placed_order):
        change = order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.DONE)

        assert change.previous_status is OrderStatus.PENDING
        assert change.new_status is OrderStatus.DONE
        assert placed_order.status is OrderStatus.DONE
        # Paying keeps the reservation
        assert uow.products.get_by_id(1).stock == 3

    def test_cancel_releases_stock(self, uow, principal, placed_order):
        order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.CANCELLED)

        assert placed_order.status is OrderStatus.CANCELLED
        assert uow.products.get_by_id(1).stock == 5

    def test_done_then_cancelled_conflicts(self, uow, principal, placed_order):
        order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.DONE)

        with pytest.raises(ConflictError, match="Pesanan sudah diselesaikan"):
            order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.CANCELLED)

        assert placed_order.status is OrderStatus.DONE
        assert uow.products.get_by_id(1).stock == 3

    def test_cancelled_is_terminal(self, uow, principal, placed_order):
        order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.CANCELLED)

        with pytest.raises(ConflictError, match="Pesanan sudah dibatalkan"):
            order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.DONE)

    def test_not_owner(self, uow, other_principal, placed_order):
        with pytest.raises(AuthorizationError):
            order_service.update_order_status(uow, placed_order.id, other_principal, OrderStatus.DONE)
        assert placed_order.status is OrderStatus.PENDING

    def test_missing(self, uow, principal):
        with pytest.raises(NotFoundError):
            order_service.update_order_status(uow, 3, principal, OrderStatus.DONE)

    def test_back_to_pending_rejected(self, uow, principal, placed_order):
        with pytest.raises(ValidationError):
            order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.PENDING)


class TestUpdateData:
    def test_increase_quantity_applies_delta(self, uow, principal, placed_order):
        result = order_service.update_order_data(uow, placed_order.id, principal, items((1, 5)))

        assert uow.products.get_by_id(1).stock == 0
        assert result.total_price == 50
        assert placed_order.total_price == 50
        assert [(i.product_id, i.quantity) for i in placed_order.items] == [(1, 5)]

    def test_decrease_quantity_releases_stock(self, uow, principal, placed_order):
        result = order_service.update_order_data(uow, placed_order.id, principal, items((1, 1)))

        assert uow.products.get_by_id(1).stock == 4
        assert result.total_price == 10

    def test_delta_above_stock_rejected(self, uow, principal, placed_order):
        with pytest.raises(ValidationError, match="Stok tidak mencukupi"):
            order_service.update_order_data(uow, placed_order.id, principal, items((1, 6)))

        assert uow.products.get_by_id(1).stock == 3
        assert placed_order.items[0].quantity == 2
        assert placed_order.total_price == 20

    def test_new_line_uses_current_price(self, uow, principal, placed_order, add_product):
        add_product(name="Teh Tarik", price=7, stock=4)

        result = order_service.update_order_data(uow, placed_order.id, principal, items((2, 3)))

        assert uow.products.get_by_id(2).stock == 1
        assert {(i.product_id, i.quantity, i.price) for i in placed_order.items} == {(1, 2, 10), (2, 3, 7)}
        assert result.total_price == 20 + 21

    def test_validates_every_line_before_writing(self, uow, principal, placed_order, add_product):
        add_product(name="Teh Tarik", price=7, stock=1)

        with pytest.raises(ValidationError, match="Teh Tarik"):
            order_service.update_order_data(uow, placed_order.id, principal, items((1, 4), (2, 2)))

        assert uow.products.get_by_id(1).stock == 3
        assert uow.products.get_by_id(2).stock == 1
        assert len(placed_order.items) == 1

    def test_keeps_captured_price(self, uow, principal, placed_order):
        uow.products.get_by_id(1).price = 99

        result = order_service.update_order_data(uow, placed_order.id, principal, items((1, 3)))

        assert result.total_price == 30
        assert result.order_items[0].price == 10
        assert result.order_items[0].product_price == 99

    def test_not_owner(self, uow, other_principal, placed_order):
        with pytest.raises(AuthorizationError):
            order_service.update_order_data(uow, placed_order.id, other_principal, items((1, 1)))

    def test_terminal_order(self, uow, principal, placed_order):
        order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.DONE)
        with pytest.raises(ConflictError):
            order_service.update_order_data(uow, placed_order.id, principal, items((1, 1)))

    def test_unknown_product(self, uow, principal, placed_order):
        with pytest.raises(ValidationError, match="tidak ditemukan"):
            order_service.update_order_data(uow, placed_order.id, principal, items((8, 1)))

    def test_without_items_keeps_order(self, uow, principal, placed_order):
        result = order_service.update_order_data(uow, placed_order.id, principal, None)
        assert result.total_price == 20
        assert uow.products.get_by_id(1).stock == 3


class TestDeleteOrder:
    def test_restores_stock_and_removes_order(self, uow, principal, placed_order):
        deleted = order_service.delete_order(uow, placed_order.id, principal)

        assert deleted.order_id == placed_order.id
        assert uow.products.get_by_id(1).stock == 5
        assert uow.orders.get_by_id(placed_order.id) is None
        assert placed_order.items == []

    def test_after_update(self, uow, principal, placed_order):
        order_service.update_order_data(uow, placed_order.id, principal, items((1, 5)))
        order_service.delete_order(uow, placed_order.id, principal)
        assert uow.products.get_by_id(1).stock == 5

    def test_not_owner(self, uow, other_principal, placed_order):
        with pytest.raises(AuthorizationError, match="menghapus"):
            order_service.delete_order(uow, placed_order.id, other_principal)
        assert uow.orders.get_by_id(placed_order.id) is placed_order

    def test_paid_order(self, uow, principal, placed_order):
        order_service.update_order_status(uow, placed_order.id, principal, OrderStatus.DONE)
        with pytest.raises(ConflictError):
            order_service.delete_order(uow, placed_order.id, principal)
        assert uow.products.get_by_id(1).stock == 3

    def test_missing(self, uow, principal):
        with pytest.raises(NotFoundError):
            order_service.delete_order(uow, 5, principal)
