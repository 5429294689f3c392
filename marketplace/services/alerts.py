"""
Alertas internas de inventario: administradores y proveedores.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from core.metrics import LOW_STOCK_ALERTS
from notifications.models import UserNotification
from notifications.services import InboxService

from ..models import LowStockAlert

logger = logging.getLogger(__name__)


def _target_label(product_name, variant_name=""):
    return f"{product_name} - {variant_name}" if variant_name else product_name


class StockAlertService:
    @classmethod
    def raise_low_stock_alert(cls, product, variant=None):
        """
        Registra la alerta de stock bajo y avisa a cada administrador activo.
        """
        target = variant or product
        if variant is not None:
            threshold = variant.effective_low_stock_threshold(product)
        else:
            threshold = product.effective_low_stock_threshold
        variant_name = variant.name if variant is not None else ""
        label = _target_label(product.name, variant_name)

        with transaction.atomic():
            alert = LowStockAlert.objects.create(
                product=product,
                variant=variant,
                product_name=product.name,
                variant_name=variant_name,
                current_stock=target.stock_quantity,
                threshold=threshold,
            )
            admins = list(get_user_model().objects.active_admins())
            notifications = [
                InboxService.build(
                    admin,
                    UserNotification.NotificationType.LOW_STOCK_ALERT,
                    title="Alerta de stock bajo",
                    message=f"{label} tiene {alert.current_stock} unidades (umbral: {threshold}).",
                    link=f"/admin/inventory/product/{product.pk}",
                    payload={
                        "alert_id": str(alert.pk),
                        "product_id": str(product.pk),
                        "variant_id": str(variant.pk) if variant is not None else None,
                        "current_stock": alert.current_stock,
                        "threshold": threshold,
                    },
                )
                for admin in admins
            ]
            InboxService.deliver_many(notifications)

        LOW_STOCK_ALERTS.inc()
        logger.info(
            "Alerta de stock bajo para %s (%d/%d); %d administradores avisados.",
            label, alert.current_stock, threshold, len(admins),
        )
        return alert

    @staticmethod
    def notify_supplier(order):
        """Avisa al usuario vinculado del proveedor. Sin usuario no hace nada."""
        supplier = order.supplier
        if supplier is None or supplier.user_id is None:
            return None
        label = _target_label(order.product_name, order.variant_name)
        return InboxService.deliver(
            supplier.user,
            UserNotification.NotificationType.PURCHASE_ORDER_CREATED,
            title="Nueva orden de compra",
            message=f"Se solicitaron {order.quantity} unidades de {label}.",
            link=f"/supplier/purchase-orders/{order.pk}",
            payload={
                "purchase_order_id": str(order.pk),
                "product_id": str(order.product_id) if order.product_id else None,
                "variant_id": str(order.variant_id) if order.variant_id else None,
                "quantity": order.quantity,
            },
        )
