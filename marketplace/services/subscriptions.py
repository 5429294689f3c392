from django.contrib.auth import get_user_model

from ..models import StockNotificationSubscription


class StockSubscriptionService:
    """Alta y baja de avisos de disponibilidad para clientes."""

    @staticmethod
    def subscribe(user, product, variant=None):
        """
        Devuelve (suscripción, creada). Si ya hay una pendiente para el mismo
        producto y variante se reutiliza.
        """
        if variant is not None and variant.product_id != product.pk:
            raise ValueError("La variante no pertenece al producto indicado.")
        existing = (
            StockNotificationSubscription.objects.pending()
            .for_target(product, variant)
            .filter(user=user)
            .first()
        )
        if existing is not None:
            return existing, False
        subscription = StockNotificationSubscription.objects.create(
            user=user, product=product, variant=variant
        )
        return subscription, True

    @staticmethod
    def unsubscribe(user, product, variant=None):
        deleted, _ = (
            StockNotificationSubscription.objects.for_target(product, variant)
            .filter(user=user)
            .delete()
        )
        return deleted

    @staticmethod
    def is_subscribed(user, product, variant=None):
        return (
            StockNotificationSubscription.objects.pending()
            .for_target(product, variant)
            .filter(user=user)
            .exists()
        )

    @staticmethod
    def pending_subscribers(product, variant=None):
        user_ids = (
            StockNotificationSubscription.objects.pending()
            .for_target(product, variant)
            .values("user_id")
        )
        return get_user_model().objects.filter(pk__in=user_ids)
