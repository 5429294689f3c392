from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Iterable, Iterator, List, TypeVar

from django.utils.timezone import now

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> Any:
    """Retorna el timestamp aware en UTC (alias de django.utils.timezone.now)."""
    return now()


def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """
    Parte un iterable en listas de a lo sumo `size` elementos.

    Funciona con iteradores perezosos (QuerySet.iterator()) sin materializar
    toda la secuencia.

    Ejemplo:
        >>> list(chunked([1, 2, 3, 4, 5], 2))
        [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError("El tamaño del lote debe ser al menos 1.")
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


def writes_per_batch(write_limit: int, writes_per_item: int) -> int:
    """
    Cuántos ítems caben en un lote sin superar `write_limit` escrituras,
    cuando cada ítem genera `writes_per_item` escrituras. Nunca menos de 1.
    """
    return max(1, write_limit // max(1, writes_per_item))
