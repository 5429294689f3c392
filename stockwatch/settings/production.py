"""
Settings completos: base + Celery + logging.

Los parciales se importan en orden porque celery.py y logging.py leen
valores definidos en base.py.
"""
from .base import *  # noqa: F401,F403
from .celery import *  # noqa: F401,F403
from .logging import *  # noqa: F401,F403
