import uuid

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import InvalidStateTransitionError
from marketplace.models import (
    Product,
    ProductVariant,
    PurchaseOrder,
    ReorderStatus,
    StockNotificationSubscription,
)


@pytest.mark.django_db
class TestStockDerivation:
    def test_tracked_product_in_stock_only_with_units(self):
        product = Product.objects.create(name="Jabón", stock_quantity=0)
        assert product.in_stock is False

        product.stock_quantity = 4
        product.save(update_fields=["stock_quantity"])
        product.refresh_from_db()
        assert product.in_stock is True

    def test_untracked_product_is_always_in_stock(self):
        product = Product.objects.create(name="Gift card", stock_quantity=0, track_inventory=False)
        assert product.in_stock is True

    def test_variant_save_syncs_parent(self, product_with_variants):
        assert product_with_variants.has_variants is True
        assert product_with_variants.in_stock is False

        variant = product_with_variants.variants.get(sku="CREMA-50")
        variant.stock_quantity = 2
        variant.save()

        product_with_variants.refresh_from_db()
        variant.refresh_from_db()
        assert variant.in_stock is True
        assert product_with_variants.in_stock is True

    def test_deleting_last_variant_restores_own_stock_rule(self):
        product = Product.objects.create(name="Vela", stock_quantity=7)
        variant = ProductVariant.objects.create(product=product, name="Lavanda", sku="VELA-LAV")
        product.refresh_from_db()
        assert product.has_variants is True
        assert product.in_stock is False

        variant.delete()
        product.refresh_from_db()
        assert product.has_variants is False
        assert product.in_stock is True


@pytest.mark.django_db
class TestThresholds:
    def test_variant_threshold_falls_back_to_product_then_default(self):
        product = Product.objects.create(name="Tónico", low_stock_threshold=3)
        variant = ProductVariant.objects.create(product=product, name="200ml", sku="TON-200", stock_quantity=4)

        assert variant.effective_low_stock_threshold() == 3
        assert variant.is_low_stock() is False

        product.low_stock_threshold = None
        assert variant.effective_low_stock_threshold(product) == 5
        assert variant.is_low_stock(product) is True

        variant.low_stock_threshold = 1
        assert variant.effective_low_stock_threshold(product) == 1

    def test_product_threshold_zero_means_default(self):
        product = Product(name="Gel Frío", stock_quantity=3, low_stock_threshold=0)

        assert product.effective_low_stock_threshold == 5
        assert product.is_low_stock() is True

    def test_variant_threshold_zero_is_honored(self):
        product = Product.objects.create(name="Tónico", low_stock_threshold=3)
        variant = ProductVariant.objects.create(
            product=product, name="100ml", sku="TON-100", stock_quantity=2, low_stock_threshold=0
        )

        assert variant.effective_low_stock_threshold() == 0
        assert variant.is_low_stock() is False

    def test_reorder_quantity_default(self):
        product = Product(name="Mascarilla")
        assert product.effective_reorder_quantity == 50
        product.reorder_quantity = 12
        assert product.effective_reorder_quantity == 12


@pytest.mark.django_db
class TestStateConstraints:
    def test_reorder_in_progress_requires_timestamp(self):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Product.objects.create(name="Roto", reorder_status=ReorderStatus.IN_PROGRESS)

    def test_notified_subscription_requires_timestamp(self, customer, product):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                StockNotificationSubscription.objects.create(
                    user=customer,
                    product=product,
                    status=StockNotificationSubscription.Status.NOTIFIED,
                )

    def test_pending_subscription_cannot_have_timestamp(self, customer, product):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                StockNotificationSubscription.objects.create(
                    user=customer, product=product, notified_at=timezone.now()
                )

    def test_mark_notified_only_once(self, customer, product):
        subscription = StockNotificationSubscription.objects.create(user=customer, product=product)
        subscription.mark_notified(timezone.now())
        assert subscription.notified is True

        with pytest.raises(InvalidStateTransitionError):
            subscription.mark_notified(timezone.now())

    def test_purchase_order_quantity_must_be_positive(self, product):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                PurchaseOrder.objects.create(product=product, product_name=product.name, quantity=0)


@pytest.mark.django_db
class TestPurchaseOrderTransitions:
    def test_cancelled_order_cannot_be_received(self):
        order = PurchaseOrder.objects.create(
            product_id=uuid.uuid4(),
            product_name="Fantasma",
            quantity=5,
            status=PurchaseOrder.Status.CANCELLED,
        )
        with pytest.raises(InvalidStateTransitionError):
            order.mark_received()

        order.refresh_from_db()
        assert order.status == PurchaseOrder.Status.CANCELLED
        assert order.received_at is None
