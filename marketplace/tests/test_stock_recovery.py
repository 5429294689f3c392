import pytest
from datetime import timedelta
from unittest.mock import patch
from django.db import DatabaseError
from django.utils import timezone

from core.caching import CacheKeys, acquire_lock
from marketplace.models import Product, ProductVariant, StockNotificationSubscription
from marketplace.services import StockRecoveryService
from marketplace.tasks import check_products_back_in_stock
from notifications.models import UserNotification
from notifications.services import InboxService


def _subscribe(user, product, variant=None):
    return StockNotificationSubscription.objects.create(user=user, product=product, variant=variant)


@pytest.mark.django_db
class TestStockRecoverySweep:
    def test_in_stock_subscription_gets_exactly_one_notification(self, customer, product):
        subscription = _subscribe(customer, product)

        summary = StockRecoveryService().run()

        subscription.refresh_from_db()
        notifications = UserNotification.objects.filter(user=customer)
        assert summary["notified"] == 1
        assert notifications.count() == 1
        notification = notifications.get()
        assert notification.notification_type == UserNotification.NotificationType.PRODUCT_BACK_IN_STOCK
        assert notification.link == f"/product/{product.pk}"
        assert notification.payload["product_image"] == product.image_url
        assert subscription.status == StockNotificationSubscription.Status.NOTIFIED
        assert subscription.notified_at is not None
        assert InboxService.unread_count(customer) == 1

    def test_out_of_stock_subscription_stays_pending(self, customer, out_of_stock_product):
        subscription = _subscribe(customer, out_of_stock_product)

        StockRecoveryService().run()

        subscription.refresh_from_db()
        assert subscription.status == StockNotificationSubscription.Status.PENDING
        assert not UserNotification.objects.exists()

    def test_untracked_product_counts_as_available(self, customer):
        product = Product.objects.create(name="Bono regalo", track_inventory=False)
        _subscribe(customer, product)

        summary = StockRecoveryService().run()

        assert summary["notified"] == 1

    def test_deleted_product_subscription_is_removed(self, customer, product):
        subscription = _subscribe(customer, product)
        product.delete()

        summary = StockRecoveryService().run()

        assert summary["removed"] == 1
        assert not StockNotificationSubscription.objects.filter(pk=subscription.pk).exists()
        assert not UserNotification.objects.exists()

    def test_deleted_variant_subscription_is_removed(self, customer, product_with_variants):
        variant = product_with_variants.variants.get(sku="CREMA-50")
        subscription = _subscribe(customer, product_with_variants, variant)
        variant.delete()

        summary = StockRecoveryService().run()

        assert summary["removed"] == 1
        assert not StockNotificationSubscription.objects.filter(pk=subscription.pk).exists()

    def test_variant_subscription_uses_variant_stock(self, customer, other_customer, product_with_variants):
        restocked = product_with_variants.variants.get(sku="CREMA-50")
        ProductVariant.objects.filter(pk=restocked.pk).update(stock_quantity=8, in_stock=True)
        empty = product_with_variants.variants.get(sku="CREMA-100")
        notified = _subscribe(customer, product_with_variants, restocked)
        waiting = _subscribe(other_customer, product_with_variants, empty)

        StockRecoveryService().run()

        notified.refresh_from_db()
        waiting.refresh_from_db()
        assert notified.notified is True
        assert waiting.notified is False
        notification = UserNotification.objects.get(user=customer)
        assert notification.payload["variant_id"] == str(restocked.pk)
        assert "50ml" in notification.message

    def test_second_run_is_idempotent(self, customer, other_customer, product):
        _subscribe(customer, product)
        _subscribe(other_customer, product)

        StockRecoveryService().run()
        second = StockRecoveryService().run()

        assert second["checked"] == 0
        assert second["notified"] == 0
        assert UserNotification.objects.count() == 2

    def test_already_notified_subscription_is_left_alone(self, customer, product):
        notified_at = timezone.now() - timedelta(days=2)
        StockNotificationSubscription.objects.create(
            user=customer,
            product=product,
            status=StockNotificationSubscription.Status.NOTIFIED,
            notified_at=notified_at,
        )

        StockRecoveryService().run()

        assert not UserNotification.objects.exists()
        assert StockNotificationSubscription.objects.get().notified_at == notified_at

    def test_batches_respect_write_limit_and_deliver_everything(self, django_user_model, product):
        users = [
            django_user_model.objects.create_user(
                phone_number=f"+57300000000{i}", first_name=f"Cliente {i}", password="x"
            )
            for i in range(5)
        ]
        for user in users:
            _subscribe(user, product)

        service = StockRecoveryService(write_limit=6)
        assert service.batch_size * StockRecoveryService.WRITES_PER_DELIVERY <= 6

        summary = service.run()

        assert summary["batches"] == 3
        assert summary["notified"] == 5
        assert UserNotification.objects.count() == 5
        assert not StockNotificationSubscription.objects.pending().exists()

    def test_failed_batch_keeps_committed_work(self, django_user_model, product):
        users = [
            django_user_model.objects.create_user(
                phone_number=f"+57311000000{i}", first_name=f"Cliente {i}", password="x"
            )
            for i in range(4)
        ]
        for user in users:
            _subscribe(user, product)

        service = StockRecoveryService(write_limit=6)
        original = service._deliver
        calls = {"n": 0}

        def flaky(ready):
            calls["n"] += 1
            if calls["n"] == 2:
                raise DatabaseError("conexión perdida")
            return original(ready)

        with patch.object(service, "_deliver", side_effect=flaky):
            with pytest.raises(DatabaseError):
                service.run()

        assert UserNotification.objects.count() == 2
        assert StockNotificationSubscription.objects.pending().count() == 2

        StockRecoveryService().run()
        assert UserNotification.objects.count() == 4


@pytest.mark.django_db
class TestCheckProductsBackInStockTask:
    def test_task_returns_summary(self, customer, product):
        _subscribe(customer, product)

        result = check_products_back_in_stock()

        assert result["status"] == "ok"
        assert result["notified"] == 1

    def test_task_skips_when_another_run_holds_the_lock(self, customer, product):
        _subscribe(customer, product)
        assert acquire_lock(CacheKeys.STOCK_RECOVERY_SWEEP, timeout=60)

        result = check_products_back_in_stock()

        assert result == {"status": "skipped"}
        assert not UserNotification.objects.exists()

    def test_task_logs_and_returns_on_store_error(self):
        with patch(
            "marketplace.services.StockRecoveryService.run",
            side_effect=DatabaseError("timeout"),
        ):
            result = check_products_back_in_stock()

        assert result == {"status": "error"}
