"""
Claves de caché centralizadas y locks distribuidos para los barridos.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass

from django.core.cache import cache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKeys:
    """
    Contenedor inmutable de las claves de caché del sistema.

    Uso:
        from core.caching import CacheKeys
        acquire_lock(CacheKeys.STOCK_RECOVERY_SWEEP)
    """
    # Barridos programados de inventario
    STOCK_RECOVERY_SWEEP = "inventory:sweep:stock_recovery:v1"
    LOW_STOCK_SWEEP = "inventory:sweep:low_stock:v1"


def acquire_lock(key: str, timeout: int = 5, token: str | None = None) -> bool:
    """
    Intenta adquirir un lock distribuido usando cache.add (SETNX).
    Devuelve True si se adquiere, False en caso contrario.
    """
    return cache.add(f"lock:{key}", token or True, timeout=timeout)


def release_lock(key: str, token: str | None = None) -> None:
    """
    Libera el lock. Con token, solo lo borra si sigue siendo del mismo dueño,
    para no liberar el lock que otro proceso tomó después de una expiración.
    """
    lock_key = f"lock:{key}"
    # get y delete no son atómicos. Es seguro porque el lock vive más que el
    # límite duro de la tarea (ver settings/celery.py): el dueño siempre
    # libera antes de que expire.
    if token is not None and cache.get(lock_key) != token:
        logger.warning("Lock %s expiró antes de liberarse; no se elimina.", key)
        return
    cache.delete(lock_key)


@contextmanager
def sweep_lock(key: str, timeout: int):
    """
    Context manager que cede True si este proceso obtuvo el lock del barrido
    y False si otra ejecución lo tiene. El lock expira solo tras `timeout`
    segundos para que un worker terminado a la fuerza no lo deje tomado.
    """
    token = str(uuid.uuid4())
    acquired = acquire_lock(key, timeout=timeout, token=token)
    try:
        yield acquired
    finally:
        if acquired:
            release_lock(key, token=token)
