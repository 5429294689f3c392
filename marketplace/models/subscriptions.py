from django.conf import settings
from django.db import models

from core.exceptions import InvalidStateTransitionError
from core.models import BaseModel


class StockSubscriptionQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(status=StockNotificationSubscription.Status.PENDING)

    def for_target(self, product, variant=None):
        """Suscripciones a un producto; sin variante significa el producto principal."""
        product_id = getattr(product, "pk", product)
        if variant is None:
            return self.filter(product_id=product_id, variant__isnull=True)
        return self.filter(product_id=product_id, variant_id=getattr(variant, "pk", variant))


class StockNotificationSubscription(BaseModel):
    """
    Pedido de un cliente para ser avisado cuando un producto o variante
    agotada vuelva a estar disponible. Se notifica una sola vez.

    `product` y `variant` no llevan restricción en base de datos: al borrar
    el producto o la variante la suscripción queda huérfana y el barrido
    de recuperación de stock la elimina.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pendiente"
        NOTIFIED = "NOTIFIED", "Notificada"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="stock_subscriptions",
        verbose_name="Usuario",
    )
    product = models.ForeignKey(
        "marketplace.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="stock_subscriptions",
        verbose_name="Producto",
    )
    variant = models.ForeignKey(
        "marketplace.ProductVariant",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="stock_subscriptions",
        verbose_name="Variante",
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        verbose_name="Estado",
    )
    notified_at = models.DateTimeField(null=True, blank=True)

    objects = StockSubscriptionQuerySet.as_manager()

    class Meta:
        verbose_name = "Suscripción de Disponibilidad"
        verbose_name_plural = "Suscripciones de Disponibilidad"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status", "product", "variant"], name="stock_sub_status_target_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status="PENDING", notified_at__isnull=True)
                    | models.Q(status="NOTIFIED", notified_at__isnull=False)
                ),
                name="stock_subscription_status_matches_notified_at",
            ),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.product_id}/{self.variant_id or '-'} ({self.status})"

    @property
    def notified(self):
        return self.status == self.Status.NOTIFIED

    def mark_notified(self, when):
        if self.notified:
            raise InvalidStateTransitionError(self.status, self.Status.NOTIFIED)
        self.status = self.Status.NOTIFIED
        self.notified_at = when
