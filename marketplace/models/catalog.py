from django.conf import settings
from django.db import models

from core.models import BaseModel

# Campos cuyo cambio obliga a recalcular `in_stock` al guardar.
STOCK_FIELDS = frozenset({"stock_quantity", "track_inventory", "has_variants"})


class ReorderStatus(models.TextChoices):
    IDLE = "IDLE", "Sin reposición pendiente"
    IN_PROGRESS = "IN_PROGRESS", "Reposición en curso"


class StockTrackedModel(BaseModel):
    """
    Campos de inventario compartidos por productos y variantes.

    `reorder_status` es la única guarda contra órdenes de compra duplicadas:
    pasa a IN_PROGRESS cuando la reposición automática abre una orden y
    vuelve a IDLE solo cuando esa orden se recibe.
    """

    stock_quantity = models.PositiveIntegerField(default=0, verbose_name="Stock")
    track_inventory = models.BooleanField(
        default=True,
        verbose_name="Controlar Inventario",
        help_text="Si es falso, el ítem se considera siempre disponible.",
    )
    low_stock_threshold = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Umbral de Stock Bajo",
        help_text="Vacío usa el umbral del producto o el valor por defecto.",
    )
    auto_reorder = models.BooleanField(default=False, verbose_name="Reposición Automática")
    reorder_status = models.CharField(
        max_length=16,
        choices=ReorderStatus.choices,
        default=ReorderStatus.IDLE,
        verbose_name="Estado de Reposición",
    )
    reorder_quantity = models.PositiveIntegerField(
        null=True, blank=True, verbose_name="Cantidad a Reponer"
    )
    last_reorder_at = models.DateTimeField(null=True, blank=True)
    last_purchase_order = models.ForeignKey(
        "marketplace.PurchaseOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    preferred_supplier = models.ForeignKey(
        "marketplace.Supplier",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Proveedor Preferido",
    )
    in_stock = models.BooleanField(default=False, editable=False, verbose_name="Disponible")

    class Meta(BaseModel.Meta):
        abstract = True
        constraints = [
            models.CheckConstraint(
                condition=models.Q(reorder_status=ReorderStatus.IDLE)
                | models.Q(last_reorder_at__isnull=False),
                name="%(app_label)s_%(class)s_reorder_has_timestamp",
            ),
        ]

    @property
    def reorder_in_progress(self):
        return self.reorder_status == ReorderStatus.IN_PROGRESS

    @property
    def effective_reorder_quantity(self):
        return self.reorder_quantity or settings.STOCK_DEFAULT_REORDER_QUANTITY

    def start_reorder(self, purchase_order, when):
        self.reorder_status = ReorderStatus.IN_PROGRESS
        self.last_reorder_at = when
        self.last_purchase_order = purchase_order

    def compute_in_stock(self):
        raise NotImplementedError

    def save(self, *args, **kwargs):
        self.in_stock = self.compute_in_stock()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and STOCK_FIELDS.intersection(update_fields):
            kwargs["update_fields"] = {*update_fields, "in_stock"}
        super().save(*args, **kwargs)


class Product(StockTrackedModel):
    name = models.CharField(max_length=255, verbose_name="Nombre del Producto")
    description = models.TextField(blank=True, verbose_name="Descripción")
    image_url = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name="URL de Imagen Externa",
    )
    has_variants = models.BooleanField(
        default=False,
        verbose_name="Tiene Variantes",
        help_text="Con variantes, el stock propio del producto se ignora.",
    )

    class Meta(StockTrackedModel.Meta):
        verbose_name = "Producto"
        verbose_name_plural = "Productos"
        indexes = [
            models.Index(fields=["track_inventory"], name="product_track_inventory_idx"),
        ]

    def __str__(self):
        return self.name

    def compute_in_stock(self):
        if self.has_variants:
            if self._state.adding:
                return False
            return self.variants.filter(in_stock=True).exists()
        return self.is_available()

    def is_available(self):
        """Regla de disponibilidad del producto sin variantes."""
        return (self.track_inventory and self.stock_quantity > 0) or not self.track_inventory

    @property
    def effective_low_stock_threshold(self):
        """
        Un umbral en 0 cuenta como no configurado y aplica el default; en la
        variante, en cambio, 0 es un umbral válido.
        """
        return self.low_stock_threshold or settings.STOCK_DEFAULT_LOW_STOCK_THRESHOLD

    def is_low_stock(self):
        return self.track_inventory and self.stock_quantity <= self.effective_low_stock_threshold

    @classmethod
    def sync_variant_state(cls, product_id):
        """
        Recalcula `has_variants` e `in_stock` del producto a partir de sus
        variantes con UPDATE directos. No dispara señales: la notificación
        de reingreso de variantes sale del guardado de cada variante.
        """
        variants = ProductVariant.objects.filter(product_id=product_id)
        if variants.exists():
            cls.objects.filter(pk=product_id).update(
                has_variants=True,
                in_stock=variants.filter(in_stock=True).exists(),
            )
            return
        # Sin variantes vuelve a aplicar la regla del stock propio.
        product = cls.objects.filter(pk=product_id).first()
        if product is not None:
            cls.objects.filter(pk=product_id).update(
                has_variants=False, in_stock=product.is_available()
            )


class ProductVariant(StockTrackedModel):
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variants",
        verbose_name="Producto",
    )
    name = models.CharField(
        max_length=100,
        verbose_name="Nombre de la Variante",
        help_text="Ej: 50ml, 100ml, Pack x3",
    )
    sku = models.CharField(max_length=100, unique=True, verbose_name="SKU")

    class Meta(StockTrackedModel.Meta):
        verbose_name = "Variante de Producto"
        verbose_name_plural = "Variantes de Producto"
        ordering = ["product__name", "name"]

    def __str__(self):
        return f"{self.product.name} - {self.name}"

    def compute_in_stock(self):
        return self.stock_quantity > 0

    def effective_low_stock_threshold(self, product=None):
        if self.low_stock_threshold is not None:
            return self.low_stock_threshold
        product = product or self.product
        return product.effective_low_stock_threshold

    def is_low_stock(self, product=None):
        return self.track_inventory and self.stock_quantity <= self.effective_low_stock_threshold(product)

    def save(self, *args, **kwargs):
        update_fields = kwargs.get("update_fields")
        super().save(*args, **kwargs)
        if update_fields is None or STOCK_FIELDS.intersection(update_fields):
            Product.sync_variant_state(self.product_id)
