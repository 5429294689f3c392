"""
Settings para la suite de tests (pytest-django).

Fija valores de entorno seguros antes de cargar los parciales, y reemplaza
Postgres/Redis por SQLite en memoria y caché local.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-solo-para-pytest-no-usar-en-produccion")
os.environ.setdefault("DEBUG", "1")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")

from .production import *  # noqa: E402,F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "stockwatch-tests",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Valores explícitos para que los tests no dependan del entorno local
STOCK_DEFAULT_LOW_STOCK_THRESHOLD = 5
STOCK_DEFAULT_REORDER_QUANTITY = 50
STOCK_BATCH_WRITE_LIMIT = 500
STOCK_SWEEP_LOCK_TIMEOUT = 600
