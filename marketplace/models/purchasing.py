from django.conf import settings
from django.db import models

from core.exceptions import InvalidStateTransitionError
from core.models import BaseModel
from core.utils import utc_now


class Supplier(BaseModel):
    name = models.CharField(max_length=255, verbose_name="Nombre")
    email = models.EmailField(blank=True, verbose_name="Correo Electrónico")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supplier_accounts",
        verbose_name="Usuario Vinculado",
        help_text="Cuenta que recibe los avisos de nuevas órdenes de compra.",
    )
    is_active = models.BooleanField(default=True, verbose_name="Activo")

    class Meta:
        verbose_name = "Proveedor"
        verbose_name_plural = "Proveedores"
        ordering = ["name"]

    def __str__(self):
        return self.name


class PurchaseOrder(BaseModel):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pendiente"
        ORDERED = "ORDERED", "Pedida"
        SHIPPED = "SHIPPED", "Enviada"
        RECEIVED = "RECEIVED", "Recibida"
        CANCELLED = "CANCELLED", "Cancelada"

    product = models.ForeignKey(
        "marketplace.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="purchase_orders",
        verbose_name="Producto",
    )
    variant = models.ForeignKey(
        "marketplace.ProductVariant",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="purchase_orders",
        verbose_name="Variante",
    )
    product_name = models.CharField(max_length=255, blank=True)
    variant_name = models.CharField(max_length=100, blank=True)
    quantity = models.PositiveIntegerField(verbose_name="Cantidad")
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders",
        verbose_name="Proveedor",
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        verbose_name="Estado",
    )
    auto_generated = models.BooleanField(default=False, verbose_name="Generada Automáticamente")
    received_at = models.DateTimeField(null=True, blank=True)
    stock_applied_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Momento en que la recepción se sumó al inventario.",
    )

    class Meta:
        verbose_name = "Orden de Compra"
        verbose_name_plural = "Órdenes de Compra"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="purchase_order_quantity_positive",
            ),
        ]

    def __str__(self):
        label = f"{self.product_name} - {self.variant_name}" if self.variant_name else self.product_name
        return f"OC {label} x{self.quantity} ({self.status})"

    def mark_received(self, when=None):
        """
        Marca la orden como recibida. El guardado dispara la conciliación
        de inventario por señal.
        """
        if self.status in (self.Status.RECEIVED, self.Status.CANCELLED):
            raise InvalidStateTransitionError(self.status, self.Status.RECEIVED)
        self.status = self.Status.RECEIVED
        self.received_at = when or utc_now()
        self.save(update_fields=["status", "received_at", "updated_at"])


class LowStockAlert(BaseModel):
    """Registro histórico de stock bajo. Este backend solo lo crea."""

    class Status(models.TextChoices):
        NEW = "NEW", "Nueva"
        PROCESSING = "PROCESSING", "En proceso"
        RESOLVED = "RESOLVED", "Resuelta"

    product = models.ForeignKey(
        "marketplace.Product",
        on_delete=models.SET_NULL,
        null=True,
        related_name="low_stock_alerts",
    )
    variant = models.ForeignKey(
        "marketplace.ProductVariant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="low_stock_alerts",
    )
    product_name = models.CharField(max_length=255)
    variant_name = models.CharField(max_length=100, blank=True)
    current_stock = models.PositiveIntegerField()
    threshold = models.PositiveIntegerField()
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.NEW)

    class Meta:
        verbose_name = "Alerta de Stock Bajo"
        verbose_name_plural = "Alertas de Stock Bajo"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Stock bajo: {self.product_name} ({self.current_stock}/{self.threshold})"
