"""
Avisos de "producto disponible nuevamente" a los suscriptores.
"""
import logging

from django.db import transaction

from core.metrics import STOCK_NOTIFICATIONS_SENT
from core.utils import utc_now
from notifications.models import UserNotification
from notifications.services import InboxService

from ..models import Product, ProductVariant, StockNotificationSubscription

logger = logging.getLogger(__name__)


def build_back_in_stock_notification(subscription, product, variant=None):
    """Notificación sin guardar para una suscripción; compartida por handler y barrido."""
    label = f"{product.name} - {variant.name}" if variant is not None else product.name
    return InboxService.build(
        subscription.user,
        UserNotification.NotificationType.PRODUCT_BACK_IN_STOCK,
        title="¡Producto disponible nuevamente!",
        message=f"{label} ya está disponible. ¡Cómpralo antes de que se agote!",
        link=f"/product/{product.pk}",
        payload={
            "product_id": str(product.pk),
            "product_name": product.name,
            "product_image": product.image_url or "",
            "variant_id": str(variant.pk) if variant is not None else None,
            "variant_name": variant.name if variant is not None else None,
        },
    )


class BackInStockService:
    @classmethod
    def notify_subscribers(cls, product, variant=None):
        """
        Avisa a cada suscriptor PENDING del producto (o de la variante).

        Por suscriptor, la notificación, el contador y el cambio a NOTIFIED
        se confirman en una sola transacción. La fila de la suscripción se
        bloquea con skip_locked: si el barrido la tiene tomada, se omite.
        """
        pending_ids = list(
            StockNotificationSubscription.objects.pending()
            .for_target(product, variant)
            .values_list("pk", flat=True)
        )
        delivered = 0
        for subscription_id in pending_ids:
            with transaction.atomic():
                subscription = (
                    StockNotificationSubscription.objects.select_for_update(skip_locked=True, of=("self",))
                    .select_related("user")
                    .filter(pk=subscription_id, status=StockNotificationSubscription.Status.PENDING)
                    .first()
                )
                if subscription is None:
                    continue
                notification = build_back_in_stock_notification(subscription, product, variant)
                InboxService.deliver_many([notification])
                subscription.mark_notified(utc_now())
                subscription.save(update_fields=["status", "notified_at", "updated_at"])
            delivered += 1

        if delivered:
            STOCK_NOTIFICATIONS_SENT.labels(source="handler").inc(delivered)
        logger.info(
            "Aviso de reingreso para producto %s variante %s: %d suscriptores notificados.",
            product.pk, getattr(variant, "pk", None), delivered,
        )
        return delivered

    @classmethod
    def handle_stock_change(cls, product_id, variant_ids=None):
        """
        Procesa un reingreso detectado por señal. Sin `variant_ids` avisa a
        los suscriptores del producto principal; con ellos, a los de cada
        variante listada. Termina solo cuando todas las variantes fueron
        procesadas.
        """
        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            logger.warning("Producto %s no encontrado para aviso de reingreso.", product_id)
            return 0

        if not variant_ids:
            return cls.notify_subscribers(product)

        variants = ProductVariant.objects.filter(product=product, pk__in=variant_ids)
        found = {str(v.pk): v for v in variants}
        missing = {str(vid) for vid in variant_ids} - found.keys()
        if missing:
            logger.warning(
                "Variantes %s del producto %s no encontradas para aviso de reingreso.",
                sorted(missing), product_id,
            )
        return sum(cls.notify_subscribers(product, variant) for variant in found.values())
