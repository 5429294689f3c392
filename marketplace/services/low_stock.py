"""
Barrido diario de stock bajo y reposición automática.
"""
import logging

from django.db import transaction

from core.metrics import AUTO_REORDERS
from core.utils import chunked, utc_now

from ..models import Product, ProductVariant, PurchaseOrder
from .alerts import StockAlertService

logger = logging.getLogger(__name__)


class AutoReorderService:
    @staticmethod
    def resolve_supplier(product, variant=None):
        """Proveedor preferido de la variante, luego el del producto. Inactivos no cuentan."""
        for candidate in (getattr(variant, "preferred_supplier", None), product.preferred_supplier):
            if candidate is not None and candidate.is_active:
                return candidate
        return None

    @classmethod
    def reorder(cls, product, variant=None):
        """
        Abre una orden de compra automática y marca el producto o variante
        como IN_PROGRESS en la misma transacción.

        La fila objetivo se bloquea con select_for_update y el estado se
        vuelve a leer bajo el lock, así dos barridos superpuestos no abren
        dos órdenes. Devuelve None si la reposición ya no aplica.
        """
        model = ProductVariant if variant is not None else Product
        target_pk = (variant or product).pk

        with transaction.atomic():
            target = model.objects.select_for_update().filter(pk=target_pk).first()
            if target is None:
                logger.warning("%s %s desapareció antes de reponer.", model.__name__, target_pk)
                return None
            if not target.auto_reorder or target.reorder_in_progress:
                logger.info("Reposición omitida para %s %s: ya en curso o desactivada.", model.__name__, target_pk)
                return None

            supplier = cls.resolve_supplier(product, target if variant is not None else None)
            if supplier is None:
                logger.info("Sin proveedor para %s %s; la orden se crea sin proveedor.", model.__name__, target_pk)

            order = PurchaseOrder.objects.create(
                product=product,
                variant=target if variant is not None else None,
                product_name=product.name,
                variant_name=target.name if variant is not None else "",
                quantity=target.effective_reorder_quantity,
                supplier=supplier,
                status=PurchaseOrder.Status.PENDING,
                auto_generated=True,
            )
            target.start_reorder(order, utc_now())
            target.save(update_fields=["reorder_status", "last_reorder_at", "last_purchase_order", "updated_at"])

            StockAlertService.notify_supplier(order)

        AUTO_REORDERS.inc()
        logger.info(
            "Orden de compra %s creada automáticamente (%d unidades).", order.pk, order.quantity
        )
        return order


class LowStockService:
    """
    Recorre los productos con inventario controlado, registra alertas de
    stock bajo y dispara la reposición automática donde corresponde.

    Cada producto o variante se procesa por separado: un error se registra
    y el barrido continúa con el siguiente.
    """

    PRODUCTS_PER_QUERY = 200

    def __init__(self):
        self.summary = {"evaluated": 0, "alerts": 0, "reorders": 0, "errors": 0}

    def run(self):
        product_ids = list(
            Product.objects.filter(track_inventory=True)
            .order_by("created_at")
            .values_list("pk", flat=True)
        )
        for ids in chunked(product_ids, self.PRODUCTS_PER_QUERY):
            products = (
                Product.objects.filter(pk__in=ids)
                .select_related("preferred_supplier")
                .prefetch_related("variants__preferred_supplier")
                .order_by("created_at")
            )
            for product in products:
                if product.has_variants:
                    for variant in product.variants.all():
                        self.evaluate(product, variant)
                else:
                    self.evaluate(product)
        return self.summary

    def evaluate(self, product, variant=None):
        target = variant or product
        self.summary["evaluated"] += 1
        try:
            low = target.is_low_stock(product) if variant is not None else target.is_low_stock()
            if not low:
                return
            StockAlertService.raise_low_stock_alert(product, variant)
            self.summary["alerts"] += 1
            if target.auto_reorder and not target.reorder_in_progress:
                if AutoReorderService.reorder(product, variant) is not None:
                    self.summary["reorders"] += 1
        except Exception:
            self.summary["errors"] += 1
            logger.exception(
                "Error evaluando stock de %s %s", type(target).__name__, target.pk
            )
