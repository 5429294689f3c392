import os

from celery.schedules import crontab

from .base import (
    BASE_DIR,
    DEBUG,
    REDIS_URL,
    STOCK_LOW_STOCK_CRON_HOUR,
    STOCK_LOW_STOCK_CRON_MINUTE,
    STOCK_RECOVERY_CRON_MINUTE,
    STOCK_SWEEP_LOCK_TIMEOUT,
    TIME_ZONE,
    _int_env,
)

# --------------------------------------------------------------------------------------
# Celery
# --------------------------------------------------------------------------------------
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL.rsplit("/", 1)[0] + "/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)

# STOCKWATCH-OPS-REDIS-TLS: Validar Celery broker TLS en producción
if not DEBUG:
    if not CELERY_BROKER_URL.startswith("rediss://"):
        raise RuntimeError(
            "CELERY_BROKER_URL debe usar rediss:// (TLS) en producción. "
            f"URL actual: {CELERY_BROKER_URL.split('@')[-1] if '@' in CELERY_BROKER_URL else CELERY_BROKER_URL}"
        )

CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE_FILENAME = os.getenv(
    "CELERY_BEAT_SCHEDULE_FILENAME",
    "/var/run/stockwatch/celerybeat-schedule" if not DEBUG else str(BASE_DIR / "celerybeat-schedule"),
)

# STOCKWATCH-OPS-CELERY-HARDENING: los barridos recorren tablas completas,
# por eso el límite es más holgado que el de una tarea transaccional.
CELERY_TASK_ACKS_LATE = True
CELERY_TASK_TIME_LIMIT = _int_env("CELERY_TASK_TIME_LIMIT", 300)  # 5 minutos
CELERY_TASK_SOFT_TIME_LIMIT = _int_env("CELERY_TASK_SOFT_TIME_LIMIT", 270)

if STOCK_SWEEP_LOCK_TIMEOUT <= CELERY_TASK_TIME_LIMIT:
    raise RuntimeError(
        "STOCK_SWEEP_LOCK_TIMEOUT debe ser mayor que CELERY_TASK_TIME_LIMIT "
        f"({STOCK_SWEEP_LOCK_TIMEOUT} <= {CELERY_TASK_TIME_LIMIT}); el lock del barrido "
        "expiraría con la tarea aún en curso."
    )

CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_WORKER_MAX_TASKS_PER_CHILD = _int_env("CELERY_WORKER_MAX_TASKS_PER_CHILD", 500)

# Rutas de tareas a colas dedicadas
CELERY_TASK_ROUTES = {
    "marketplace.tasks.check_products_back_in_stock": {"queue": "sweeps"},
    "marketplace.tasks.check_low_stock_levels": {"queue": "sweeps"},
    "marketplace.tasks.*": {"queue": "inventory"},
}

CELERY_BEAT_SCHEDULE = {
    "check-products-back-in-stock-hourly": {
        "task": "marketplace.tasks.check_products_back_in_stock",
        "schedule": crontab(minute=STOCK_RECOVERY_CRON_MINUTE, hour="*"),
    },
    "check-low-stock-levels-daily": {
        "task": "marketplace.tasks.check_low_stock_levels",
        "schedule": crontab(minute=STOCK_LOW_STOCK_CRON_MINUTE, hour=STOCK_LOW_STOCK_CRON_HOUR),
    },
}
