import re
import uuid
from datetime import datetime, UTC
from decimal import Decimal

import pytest

from myumc.db import schemas
from myumc.services.errors import ConflictError, InvalidOperationError, NotFoundError, PermissionDeniedError
from myumc.services.store_service import StoreService, StoreSettings, calculate_totals, generate_order_number


def _product(service, **overrides):
    data = {
        "name": "Hymn Book",
        "description": "Standard hymnal",
        "price": Decimal("100.00"),
        "stock_quantity": 10,
        "sku": f"SKU-{uuid.uuid4().hex[:6]}",
        "category": "Books",
    }
    data.update(overrides)
    return service.create_product(schemas.ProductCreate(**data))


def _order_payload(cart_id):
    return schemas.OrderCreate(cart_id=cart_id, shipping_address="12 Church Rd, Harare", payment_method="EcoCash")


class TestPricing:
    def test_totals_below_free_shipping_threshold(self):
        tax, shipping, total = calculate_totals(Decimal("200.00"), StoreSettings())
        assert tax == Decimal("30.00")
        assert shipping == Decimal("50.00")
        assert total == Decimal("280.00")

    def test_totals_above_threshold_ship_free(self):
        tax, shipping, total = calculate_totals(Decimal("1200.00"), StoreSettings())
        assert tax == Decimal("180.00")
        assert shipping == Decimal("0.00")
        assert total == Decimal("1380.00")

    def test_threshold_itself_still_pays_shipping(self):
        _tax, shipping, _total = calculate_totals(Decimal("1000.00"), StoreSettings())
        assert shipping == Decimal("50.00")

    def test_tax_rounds_half_up(self):
        tax, _shipping, _total = calculate_totals(Decimal("0.10"), StoreSettings())
        # 0.10 * 0.15 = 0.015
        assert tax == Decimal("0.02")

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("STORE_TAX_RATE", "0.10")
        monkeypatch.setenv("STORE_SHIPPING_FLAT", "5")
        tax, shipping, total = calculate_totals(Decimal("20.00"), StoreSettings())
        assert (tax, shipping, total) == (Decimal("2.00"), Decimal("5.00"), Decimal("27.00"))

    def test_order_number_format(self):
        number = generate_order_number(datetime(2026, 3, 9, tzinfo=UTC))
        assert re.fullmatch(r"ORD-20260309-[0-9A-F]{8}", number)


class TestCatalogue:
    def test_duplicate_sku_conflicts_across_products_and_variants(self, db_session):
        service = StoreService(db_session)
        product = _product(service, sku="BOOK-1")
        with pytest.raises(ConflictError):
            _product(service, sku="BOOK-1")
        service.add_product_variant(product.id, schemas.ProductVariantCreate(name="Large", sku="BOOK-1-L", price=Decimal("120.00")))
        with pytest.raises(ConflictError):
            _product(service, sku="BOOK-1-L")

    def test_search_is_case_insensitive_and_skips_unavailable(self, db_session):
        service = StoreService(db_session)
        _product(service, name="Youth Bible")
        _product(service, name="Hidden Bible", is_available=False)
        _product(service, name="Candle", description="A BIBLE study candle")
        names = sorted(p.name for p in service.search_products("bible"))
        assert names == ["Candle", "Youth Bible"]

    def test_featured_products(self, db_session):
        service = StoreService(db_session)
        _product(service, name="Featured", is_featured=True)
        _product(service, name="Plain")
        assert [p.name for p in service.get_featured_products()] == ["Featured"]


class TestCartAndCheckout:
    def test_add_to_cart_merges_lines_and_checks_stock(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        product = _product(service, stock_quantity=5)
        cart = service.create_cart(user.id)

        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=product.id, quantity=2), user.id)
        item = service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=product.id, quantity=3), user.id)
        assert item.quantity == 5
        assert len(service.get_cart(cart.id).items) == 1

        with pytest.raises(InvalidOperationError, match="Insufficient stock"):
            service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=product.id, quantity=1), user.id)

    def test_cart_owned_by_someone_else_is_forbidden(self, db_session, user_factory):
        owner, other = user_factory(), user_factory()
        service = StoreService(db_session)
        cart = service.create_cart(owner.id)
        with pytest.raises(PermissionDeniedError):
            service.get_cart(cart.id, other.id)

    def test_variant_must_belong_to_product(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        shirt, mug = _product(service, name="Shirt"), _product(service, name="Mug")
        variant = service.add_product_variant(mug.id, schemas.ProductVariantCreate(name="Blue", sku="MUG-B", price=Decimal("5.00"), stock_quantity=3))
        cart = service.create_cart(user.id)
        with pytest.raises(NotFoundError):
            service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=shirt.id, variant_id=variant.id, quantity=1), user.id)

    def test_checkout_prices_decrements_stock_and_removes_cart(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        book = _product(service, name="Hymn Book", price=Decimal("100.00"), stock_quantity=10)
        shirt = _product(service, name="Shirt", price=Decimal("10.00"), stock_quantity=0)
        large = service.add_product_variant(shirt.id, schemas.ProductVariantCreate(name="Large", sku="SHIRT-L", price=Decimal("25.50"), stock_quantity=4))

        cart = service.create_cart(user.id)
        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=book.id, quantity=2), user.id)
        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=shirt.id, variant_id=large.id, quantity=2), user.id)

        order = service.create_order(_order_payload(cart.id), user.id)

        assert order.subtotal == Decimal("251.00")
        assert order.tax == Decimal("37.65")
        assert order.shipping_cost == Decimal("50.00")
        assert order.total == Decimal("338.65")
        assert order.status == "Pending"
        assert order.payment_status == "Pending"
        assert order.billing_address == order.shipping_address
        assert sorted(i.product_name for i in order.items) == ["Hymn Book", "Shirt (Large)"]

        db_session.expire_all()
        assert service.get_product(book.id).stock_quantity == 8
        assert service.get_product(shirt.id).variants[0].stock_quantity == 2
        with pytest.raises(NotFoundError):
            service.get_cart(cart.id)

    def test_checkout_of_empty_cart_fails(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        cart = service.create_cart(user.id)
        with pytest.raises(InvalidOperationError, match="Cart is empty"):
            service.create_order(_order_payload(cart.id), user.id)

    def test_checkout_rechecks_stock_without_partial_changes(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        plenty = _product(service, name="Plenty", stock_quantity=10)
        scarce = _product(service, name="Scarce", stock_quantity=2)
        cart = service.create_cart(user.id)
        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=plenty.id, quantity=3), user.id)
        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=scarce.id, quantity=2), user.id)

        # Someone else bought the scarce item in the meantime
        scarce.stock_quantity = 1
        db_session.commit()

        with pytest.raises(InvalidOperationError, match="Insufficient stock for Scarce"):
            service.create_order(_order_payload(cart.id), user.id)
        db_session.expire_all()
        assert service.get_product(plenty.id).stock_quantity == 10
        assert len(service.get_cart(cart.id).items) == 2

    def test_update_order_status(self, db_session, user_factory):
        user = user_factory()
        service = StoreService(db_session)
        product = _product(service)
        cart = service.create_cart(user.id)
        service.add_to_cart(cart.id, schemas.CartItemAdd(product_id=product.id, quantity=1), user.id)
        order = service.create_order(_order_payload(cart.id), user.id)

        updated = service.update_order_status(order.id, schemas.OrderStatus.shipped)
        assert updated.status == "Shipped"
        assert [o.id for o in service.list_orders(user.id)] == [order.id]
