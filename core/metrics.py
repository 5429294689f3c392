"""
Helpers para exponer métricas Prometheus del pipeline de inventario.
"""
from typing import Iterable

from prometheus_client import Counter

_counter_cache: dict[tuple[str, tuple[str, ...]], Counter] = {}


def get_counter(name: str, doc: str, labelnames: Iterable[str] = ()) -> Counter:
    """
    Devuelve un Counter registrado una sola vez por proceso.

    prometheus_client rechaza registrar dos veces el mismo nombre, así que
    todas las llamadas con el mismo (name, labelnames) comparten instancia.
    """
    key = (name, tuple(labelnames))
    if key not in _counter_cache:
        _counter_cache[key] = Counter(name, doc, list(labelnames))
    return _counter_cache[key]


STOCK_NOTIFICATIONS_SENT = get_counter(
    "stock_notifications_sent_total",
    "Avisos de producto disponible entregados a suscriptores",
    ["source"],
)
LOW_STOCK_ALERTS = get_counter(
    "stock_low_stock_alerts_total",
    "Alertas de stock bajo registradas",
)
AUTO_REORDERS = get_counter(
    "stock_auto_reorders_total",
    "Órdenes de compra automáticas creadas",
)
PURCHASE_ORDERS_RECEIVED = get_counter(
    "stock_purchase_orders_received_total",
    "Órdenes de compra recibidas aplicadas al inventario",
)
TASK_FAILURES = get_counter(
    "stock_task_failures_total",
    "Fallos no controlados en barridos y handlers de inventario",
    ["task"],
)
