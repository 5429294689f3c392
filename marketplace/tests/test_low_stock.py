import pytest
from unittest.mock import patch
from django.db import DatabaseError
from prometheus_client import REGISTRY

from core.caching import CacheKeys, acquire_lock
from marketplace.models import (
    LowStockAlert,
    Product,
    ProductVariant,
    PurchaseOrder,
    ReorderStatus,
    Supplier,
)
from marketplace.services import AutoReorderService, LowStockService, StockAlertService
from marketplace.tasks import check_low_stock_levels
from notifications.models import UserNotification


@pytest.fixture
def reorderable_product(db):
    return Product.objects.create(
        name="Exfoliante",
        stock_quantity=3,
        low_stock_threshold=5,
        track_inventory=True,
        auto_reorder=True,
    )


def _low_stock_notifications():
    return UserNotification.objects.filter(
        notification_type=UserNotification.NotificationType.LOW_STOCK_ALERT
    )


@pytest.mark.django_db
class TestLowStockSweep:
    def test_low_stock_product_alerts_admins_and_reorders(
        self, admin_user, second_admin, customer, reorderable_product
    ):
        before = REGISTRY.get_sample_value("stock_auto_reorders_total") or 0

        summary = LowStockService().run()

        reorderable_product.refresh_from_db()
        assert summary["alerts"] == 1
        assert summary["reorders"] == 1
        assert LowStockAlert.objects.count() == 1
        alert = LowStockAlert.objects.get()
        assert (alert.current_stock, alert.threshold) == (3, 5)
        assert alert.status == LowStockAlert.Status.NEW
        assert set(_low_stock_notifications().values_list("user_id", flat=True)) == {
            admin_user.pk,
            second_admin.pk,
        }
        assert not UserNotification.objects.filter(user=customer).exists()

        order = PurchaseOrder.objects.get()
        assert order.auto_generated is True
        assert order.status == PurchaseOrder.Status.PENDING
        assert order.quantity == 50
        assert order.product_name == "Exfoliante"
        assert reorderable_product.reorder_status == ReorderStatus.IN_PROGRESS
        assert reorderable_product.last_reorder_at is not None
        assert reorderable_product.last_purchase_order_id == order.pk
        assert REGISTRY.get_sample_value("stock_auto_reorders_total") == before + 1

    def test_second_run_does_not_reorder_again(self, admin_user, reorderable_product):
        LowStockService().run()
        summary = LowStockService().run()

        assert summary["reorders"] == 0
        assert PurchaseOrder.objects.count() == 1
        # La alerta sí se repite mientras el stock siga bajo.
        assert LowStockAlert.objects.count() == 2

    def test_healthy_and_untracked_products_are_ignored(self, admin_user, product):
        Product.objects.create(name="Servicio digital", track_inventory=False, stock_quantity=0)

        summary = LowStockService().run()

        assert summary["alerts"] == 0
        assert not LowStockAlert.objects.exists()
        assert not _low_stock_notifications().exists()

    def test_reorder_without_auto_reorder_flag_only_alerts(self, admin_user):
        Product.objects.create(name="Loción", stock_quantity=1)

        summary = LowStockService().run()

        assert summary["alerts"] == 1
        assert summary["reorders"] == 0
        assert not PurchaseOrder.objects.exists()

    def test_variants_are_evaluated_independently(self, admin_user, product_with_variants):
        ProductVariant.objects.filter(sku="CREMA-50").update(stock_quantity=2)
        ProductVariant.objects.filter(sku="CREMA-100").update(stock_quantity=4, auto_reorder=True)

        summary = LowStockService().run()

        # Umbral del producto (3): solo 50ml está bajo.
        assert summary["alerts"] == 1
        alert = LowStockAlert.objects.get()
        assert alert.variant.sku == "CREMA-50"
        assert alert.threshold == 3
        assert alert.variant_name == "50ml"
        assert not PurchaseOrder.objects.exists()

    def test_variant_uses_default_threshold_when_none_configured(self, admin_user):
        product = Product.objects.create(name="Bálsamo")
        ProductVariant.objects.create(product=product, name="Menta", sku="BAL-MEN", stock_quantity=5)
        ProductVariant.objects.create(product=product, name="Coco", sku="BAL-COC", stock_quantity=6)

        LowStockService().run()

        alert = LowStockAlert.objects.get()
        assert alert.variant_name == "Menta"
        assert alert.threshold == 5

    def test_product_threshold_zero_alerts_with_default(self, admin_user):
        Product.objects.create(name="Gel Frío", stock_quantity=3, low_stock_threshold=0)

        summary = LowStockService().run()

        assert summary["alerts"] == 1
        alert = LowStockAlert.objects.get()
        assert (alert.current_stock, alert.threshold) == (3, 5)

    def test_product_stock_is_ignored_when_it_has_variants(self, admin_user):
        product = Product.objects.create(name="Kit Spa", stock_quantity=0, low_stock_threshold=2)
        ProductVariant.objects.create(product=product, name="Básico", sku="KIT-B", stock_quantity=10)

        summary = LowStockService().run()

        assert summary["alerts"] == 0

    def test_variant_reorder_flags_only_that_variant(self, admin_user, product_with_variants):
        ProductVariant.objects.filter(sku="CREMA-50").update(stock_quantity=1, auto_reorder=True, reorder_quantity=20)

        LowStockService().run()

        variant = ProductVariant.objects.get(sku="CREMA-50")
        sibling = ProductVariant.objects.get(sku="CREMA-100")
        product_with_variants.refresh_from_db()
        order = PurchaseOrder.objects.get()
        assert order.variant_id == variant.pk
        assert order.variant_name == "50ml"
        assert order.quantity == 20
        assert variant.reorder_status == ReorderStatus.IN_PROGRESS
        assert sibling.reorder_status == ReorderStatus.IDLE
        assert product_with_variants.reorder_status == ReorderStatus.IDLE

    def test_error_on_one_product_does_not_abort_the_sweep(self, admin_user):
        Product.objects.create(name="Primero", stock_quantity=0)
        Product.objects.create(name="Segundo", stock_quantity=0)
        original = StockAlertService.raise_low_stock_alert
        calls = {"n": 0}

        def flaky(product, variant=None):
            calls["n"] += 1
            if calls["n"] == 1:
                raise DatabaseError("deadlock")
            return original(product, variant)

        with patch.object(StockAlertService, "raise_low_stock_alert", side_effect=flaky):
            summary = LowStockService().run()

        assert summary["errors"] == 1
        assert summary["alerts"] == 1
        assert LowStockAlert.objects.count() == 1


@pytest.mark.django_db
class TestAutoReorder:
    def test_order_without_supplier_is_still_created(self, reorderable_product):
        order = AutoReorderService.reorder(reorderable_product)

        assert order is not None
        assert order.supplier is None
        assert not UserNotification.objects.filter(
            notification_type=UserNotification.NotificationType.PURCHASE_ORDER_CREATED
        ).exists()

    def test_supplier_with_linked_user_is_notified(self, reorderable_product, supplier, supplier_user):
        reorderable_product.preferred_supplier = supplier
        reorderable_product.save()

        order = AutoReorderService.reorder(reorderable_product)

        assert order.supplier == supplier
        notification = UserNotification.objects.get(user=supplier_user)
        assert notification.notification_type == UserNotification.NotificationType.PURCHASE_ORDER_CREATED
        assert notification.payload["purchase_order_id"] == str(order.pk)
        assert notification.payload["quantity"] == 50

    def test_variant_supplier_takes_precedence(self, product_with_variants, supplier):
        fallback = Supplier.objects.create(name="Proveedor General")
        product_with_variants.preferred_supplier = fallback
        product_with_variants.save()
        variant = product_with_variants.variants.get(sku="CREMA-100")
        variant.preferred_supplier = supplier
        variant.auto_reorder = True
        variant.save()

        order = AutoReorderService.reorder(product_with_variants, variant)

        assert order.supplier == supplier

    def test_inactive_supplier_falls_back_to_product_supplier(self, product_with_variants, supplier):
        inactive = Supplier.objects.create(name="Proveedor Inactivo", is_active=False)
        product_with_variants.preferred_supplier = supplier
        product_with_variants.save()
        variant = product_with_variants.variants.get(sku="CREMA-50")
        variant.preferred_supplier = inactive
        variant.auto_reorder = True
        variant.save()

        order = AutoReorderService.reorder(product_with_variants, variant)

        assert order.supplier == supplier

    def test_reorder_rechecks_flag_under_lock(self, reorderable_product):
        stale_copy = Product.objects.get(pk=reorderable_product.pk)
        AutoReorderService.reorder(reorderable_product)

        assert AutoReorderService.reorder(stale_copy) is None
        assert PurchaseOrder.objects.count() == 1

    def test_failed_order_creation_leaves_flag_idle(self, reorderable_product):
        with patch.object(PurchaseOrder.objects, "create", side_effect=DatabaseError("disk full")):
            with pytest.raises(DatabaseError):
                AutoReorderService.reorder(reorderable_product)

        reorderable_product.refresh_from_db()
        assert reorderable_product.reorder_status == ReorderStatus.IDLE


@pytest.mark.django_db
class TestCheckLowStockLevelsTask:
    def test_task_returns_summary(self, admin_user, reorderable_product):
        result = check_low_stock_levels()

        assert result["status"] == "ok"
        assert result["alerts"] == 1
        assert result["reorders"] == 1

    def test_task_skips_when_locked(self, reorderable_product):
        assert acquire_lock(CacheKeys.LOW_STOCK_SWEEP, timeout=60)

        assert check_low_stock_levels() == {"status": "skipped"}
        assert not LowStockAlert.objects.exists()

    def test_task_survives_unexpected_errors(self):
        with patch("marketplace.services.LowStockService.run", side_effect=RuntimeError("boom")):
            assert check_low_stock_levels() == {"status": "error"}
