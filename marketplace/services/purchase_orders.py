"""
Conciliación de inventario al recibir órdenes de compra.
"""
import logging

from django.db import transaction

from core.exceptions import MissingReferenceError
from core.metrics import PURCHASE_ORDERS_RECEIVED
from core.utils import utc_now

from ..models import Product, ProductVariant, PurchaseOrder, ReorderStatus

logger = logging.getLogger(__name__)


class PurchaseOrderReceiptService:
    @staticmethod
    def _lock_target(order):
        """Bloquea el producto o la variante destino de la orden."""
        product = None
        if order.product_id:
            product = Product.objects.select_for_update().filter(pk=order.product_id).first()
        if product is None:
            raise MissingReferenceError("Product", order.product_id)
        if not order.variant_id:
            return product

        variant = (
            ProductVariant.objects.select_for_update()
            .filter(pk=order.variant_id, product=product)
            .first()
        )
        if variant is None:
            raise MissingReferenceError("ProductVariant", order.variant_id)
        return variant

    @staticmethod
    def apply_receipt(order_id):
        """
        Suma la cantidad recibida al stock del producto o variante y libera
        la reposición (IN_PROGRESS -> IDLE).

        Todo ocurre en una transacción con las filas bloqueadas. La orden
        queda con `stock_applied_at`, así una entrega repetida de la tarea
        no suma el stock dos veces. El guardado del producto o variante
        recalcula `in_stock` y dispara el aviso de reingreso si corresponde.

        Devuelve True si el stock se aplicó.
        """
        with transaction.atomic():
            order = PurchaseOrder.objects.select_for_update().filter(pk=order_id).first()
            if order is None:
                logger.warning("Orden de compra %s no encontrada.", order_id)
                return False
            if order.status != PurchaseOrder.Status.RECEIVED:
                logger.info("Orden de compra %s en estado %s; nada que aplicar.", order.pk, order.status)
                return False
            if order.stock_applied_at is not None:
                logger.info("Orden de compra %s ya fue aplicada al inventario.", order.pk)
                return False

            try:
                target = PurchaseOrderReceiptService._lock_target(order)
            except MissingReferenceError as exc:
                logger.warning(
                    "Orden de compra %s: %s No se actualiza el stock.", order.pk, exc.detail
                )
                return False

            target.stock_quantity += order.quantity
            target.reorder_status = ReorderStatus.IDLE
            target.save(update_fields=["stock_quantity", "reorder_status", "updated_at"])

            order.stock_applied_at = utc_now()
            order.save(update_fields=["stock_applied_at", "updated_at"])

        PURCHASE_ORDERS_RECEIVED.inc()
        logger.info(
            "Orden de compra %s aplicada: +%d unidades a %s %s.",
            order.pk, order.quantity, type(target).__name__, target.pk,
        )
        return True
