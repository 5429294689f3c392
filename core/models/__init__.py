"""
Módulo de modelos core.

Exporta el modelo base abstracto compartido por todas las apps.
"""
from .base import BaseModel

__all__ = [
    "BaseModel",
]
