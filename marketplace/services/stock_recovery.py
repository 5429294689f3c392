"""
Barrido periódico de suscripciones pendientes.

Recupera los avisos que el handler por señal no entregó (caídas del worker,
stock repuesto por fuera del ORM, etc.) y limpia las suscripciones cuyo
producto o variante ya no existe.
"""
import logging
from collections import Counter

from django.conf import settings
from django.db import transaction

from core.metrics import STOCK_NOTIFICATIONS_SENT
from core.utils import chunked, utc_now, writes_per_batch
from notifications.models import UserNotification
from notifications.services import InboxService

from ..models import Product, ProductVariant, StockNotificationSubscription
from .back_in_stock import build_back_in_stock_notification

logger = logging.getLogger(__name__)


class StockRecoveryService:
    # Notificación, incremento del contador y cambio de estado.
    WRITES_PER_DELIVERY = 3

    def __init__(self, write_limit=None):
        self.write_limit = write_limit or settings.STOCK_BATCH_WRITE_LIMIT
        self.summary = {"checked": 0, "notified": 0, "removed": 0, "batches": 0}

    @property
    def batch_size(self):
        return writes_per_batch(self.write_limit, self.WRITES_PER_DELIVERY)

    def run(self):
        """
        Procesa las suscripciones PENDING en lotes atómicos.

        Un error corta la ejecución; los lotes ya confirmados quedan y lo
        pendiente se reintenta en el siguiente ciclo.
        """
        pending_ids = list(
            StockNotificationSubscription.objects.pending()
            .order_by("created_at")
            .values_list("pk", flat=True)
        )
        for ids in chunked(pending_ids, self.batch_size):
            self.process_batch(ids)
        return self.summary

    def process_batch(self, subscription_ids):
        with transaction.atomic():
            subscriptions = list(
                StockNotificationSubscription.objects.select_for_update(skip_locked=True, of=("self",))
                .select_related("user")
                .filter(pk__in=subscription_ids, status=StockNotificationSubscription.Status.PENDING)
            )
            products = Product.objects.in_bulk({s.product_id for s in subscriptions})
            variants = ProductVariant.objects.in_bulk(
                {s.variant_id for s in subscriptions if s.variant_id}
            )

            orphans, ready = [], []
            for subscription in subscriptions:
                self.summary["checked"] += 1
                product = products.get(subscription.product_id)
                if product is None:
                    logger.warning(
                        "Suscripción %s huérfana: producto %s eliminado.",
                        subscription.pk, subscription.product_id,
                    )
                    orphans.append(subscription.pk)
                    continue

                variant = None
                if subscription.variant_id:
                    variant = variants.get(subscription.variant_id)
                    if variant is None or variant.product_id != product.pk:
                        logger.warning(
                            "Suscripción %s huérfana: variante %s no existe en el producto %s.",
                            subscription.pk, subscription.variant_id, product.pk,
                        )
                        orphans.append(subscription.pk)
                        continue
                    in_stock = variant.stock_quantity > 0
                else:
                    in_stock = product.is_available()

                if in_stock:
                    ready.append((subscription, product, variant))

            if orphans:
                StockNotificationSubscription.objects.filter(pk__in=orphans).delete()
            if ready:
                self._deliver(ready)

        self.summary["batches"] += 1
        self.summary["removed"] += len(orphans)
        self.summary["notified"] += len(ready)
        if ready:
            STOCK_NOTIFICATIONS_SENT.labels(source="sweep").inc(len(ready))

    def _deliver(self, ready):
        now = utc_now()
        notifications = []
        for subscription, product, variant in ready:
            notifications.append(build_back_in_stock_notification(subscription, product, variant))
            subscription.mark_notified(now)
            subscription.updated_at = now

        UserNotification.objects.bulk_create(notifications)
        InboxService.increment_unread(Counter(n.user_id for n in notifications))
        StockNotificationSubscription.objects.bulk_update(
            [subscription for subscription, _, _ in ready],
            ["status", "notified_at", "updated_at"],
        )
