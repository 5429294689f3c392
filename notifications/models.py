from django.conf import settings
from django.db import models

from core.models import BaseModel


class UserNotification(BaseModel):
    """Entrada del buzón de un usuario. El consumo (UI, push) ocurre fuera de este backend."""

    class NotificationType(models.TextChoices):
        PRODUCT_BACK_IN_STOCK = "PRODUCT_BACK_IN_STOCK", "Producto disponible nuevamente"
        LOW_STOCK_ALERT = "LOW_STOCK_ALERT", "Alerta de stock bajo"
        PURCHASE_ORDER_CREATED = "PURCHASE_ORDER_CREATED", "Orden de compra creada"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="inbox_notifications",
        verbose_name="Usuario",
    )
    notification_type = models.CharField(
        max_length=32,
        choices=NotificationType.choices,
        verbose_name="Tipo",
    )
    title = models.CharField(max_length=255, verbose_name="Título")
    message = models.TextField(verbose_name="Mensaje")
    link = models.CharField(max_length=500, blank=True, verbose_name="Enlace")
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False, verbose_name="Leída")
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Notificación"
        verbose_name_plural = "Notificaciones"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notification_user_unread_idx"),
            models.Index(fields=["notification_type", "created_at"], name="notification_type_created_idx"),
        ]

    def __str__(self):
        return f"{self.notification_type} -> {self.user_id}"


class NotificationInbox(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_inbox",
    )
    # Solo se modifica con expresiones F(); ver InboxService.
    unread_count = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Buzón de Notificaciones"
        verbose_name_plural = "Buzones de Notificaciones"

    def __str__(self):
        return f"Buzón de {self.user_id} ({self.unread_count} sin leer)"
