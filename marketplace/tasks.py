import logging

from celery import shared_task
from django.conf import settings

from core.caching import CacheKeys, sweep_lock
from core.metrics import TASK_FAILURES

logger = logging.getLogger(__name__)


@shared_task
def check_products_back_in_stock():
    """
    Barrido horario: entrega los avisos de reingreso pendientes y limpia
    suscripciones huérfanas.
    """
    from .services import StockRecoveryService

    with sweep_lock(CacheKeys.STOCK_RECOVERY_SWEEP, settings.STOCK_SWEEP_LOCK_TIMEOUT) as acquired:
        if not acquired:
            logger.info("Barrido de recuperación de stock en curso en otro worker; se omite.")
            return {"status": "skipped"}
        try:
            summary = StockRecoveryService().run()
        except Exception:
            TASK_FAILURES.labels(task="check_products_back_in_stock").inc()
            logger.exception("Error en el barrido de recuperación de stock")
            return {"status": "error"}

    logger.info(
        "Barrido de recuperación: %d revisadas, %d notificadas, %d eliminadas.",
        summary["checked"], summary["notified"], summary["removed"],
    )
    return {"status": "ok", **summary}


@shared_task
def check_low_stock_levels():
    """Barrido diario de stock bajo y reposición automática."""
    from .services import LowStockService

    with sweep_lock(CacheKeys.LOW_STOCK_SWEEP, settings.STOCK_SWEEP_LOCK_TIMEOUT) as acquired:
        if not acquired:
            logger.info("Barrido de stock bajo en curso en otro worker; se omite.")
            return {"status": "skipped"}
        try:
            summary = LowStockService().run()
        except Exception:
            TASK_FAILURES.labels(task="check_low_stock_levels").inc()
            logger.exception("Error en el barrido de stock bajo")
            return {"status": "error"}

    logger.info(
        "Barrido de stock bajo: %d evaluados, %d alertas, %d órdenes automáticas, %d errores.",
        summary["evaluated"], summary["alerts"], summary["reorders"], summary["errors"],
    )
    return {"status": "ok", **summary}


@shared_task
def notify_back_in_stock(product_id, variant_ids=None):
    from .services import BackInStockService

    try:
        delivered = BackInStockService.handle_stock_change(product_id, variant_ids)
    except Exception:
        TASK_FAILURES.labels(task="notify_back_in_stock").inc()
        logger.exception("Error notificando reingreso del producto %s", product_id)
        return {"status": "error", "product_id": str(product_id)}
    return {"status": "ok", "product_id": str(product_id), "notified": delivered}


@shared_task
def process_purchase_order_receipt(order_id):
    from .services import PurchaseOrderReceiptService

    try:
        applied = PurchaseOrderReceiptService.apply_receipt(order_id)
    except Exception:
        TASK_FAILURES.labels(task="process_purchase_order_receipt").inc()
        logger.exception("Error aplicando la recepción de la orden de compra %s", order_id)
        return {"status": "error", "order_id": str(order_id)}
    return {"status": "ok" if applied else "skipped", "order_id": str(order_id)}
