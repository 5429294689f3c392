# Garantiza que la app de Celery se cargue junto con Django para que
# @shared_task quede ligado a ella.
from .celery import app as celery_app

__all__ = ("celery_app",)
