"""
Signals de inventario.

Los `pre_save` guardan en la instancia el estado previo leído de la base
de datos; los `post_save` comparan contra él y, si hubo una transición
relevante, encolan la tarea correspondiente cuando la transacción del
escritor se confirma. Las altas nunca disparan nada.
"""
import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from marketplace.models import Product, ProductVariant, PurchaseOrder
from marketplace.tasks import notify_back_in_stock, process_purchase_order_receipt

logger = logging.getLogger(__name__)


def _enqueue(task, *args):
    """Encola la tarea; un broker caído no debe romper al escritor que ya confirmó."""
    try:
        task.delay(*args)
    except Exception:
        logger.exception("No se pudo encolar %s con argumentos %s", task.name, args)


def _previous_value(sender, instance, field, raw):
    if raw or instance._state.adding:
        return None
    return sender.objects.filter(pk=instance.pk).values_list(field, flat=True).first()


@receiver(pre_save, sender=Product)
@receiver(pre_save, sender=ProductVariant)
def capture_previous_stock_state(sender, instance, raw=False, **kwargs):
    instance._previous_in_stock = _previous_value(sender, instance, "in_stock", raw)


@receiver(post_save, sender=Product)
def notify_product_back_in_stock(sender, instance, created, raw=False, **kwargs):
    """
    Solo productos sin variantes: con variantes el aviso sale de cada
    variante que vuelve a tener stock.
    """
    if created or raw or instance.has_variants:
        return
    if getattr(instance, "_previous_in_stock", None) is False and instance.in_stock:
        product_id = str(instance.pk)
        transaction.on_commit(lambda: _enqueue(notify_back_in_stock, product_id))


@receiver(post_save, sender=ProductVariant)
def notify_variant_back_in_stock(sender, instance, created, raw=False, **kwargs):
    if created or raw:
        return
    if getattr(instance, "_previous_in_stock", None) is False and instance.in_stock:
        product_id = str(instance.product_id)
        variant_id = str(instance.pk)
        transaction.on_commit(lambda: _enqueue(notify_back_in_stock, product_id, [variant_id]))


@receiver(post_delete, sender=ProductVariant)
def sync_product_after_variant_delete(sender, instance, **kwargs):
    Product.sync_variant_state(instance.product_id)


@receiver(pre_save, sender=PurchaseOrder)
def capture_previous_order_status(sender, instance, raw=False, **kwargs):
    instance._previous_status = _previous_value(sender, instance, "status", raw)


@receiver(post_save, sender=PurchaseOrder)
def reconcile_received_purchase_order(sender, instance, created, raw=False, **kwargs):
    """Reacciona solo a la transición != RECEIVED -> RECEIVED."""
    if created or raw:
        return
    previous = getattr(instance, "_previous_status", None)
    if previous is None or previous == PurchaseOrder.Status.RECEIVED:
        return
    if instance.status == PurchaseOrder.Status.RECEIVED:
        order_id = str(instance.pk)
        transaction.on_commit(lambda: _enqueue(process_purchase_order_receipt, order_id))
