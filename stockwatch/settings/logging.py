import os

from .base import BASE_DIR, DEBUG

# --------------------------------------------------------------------------------------
# Logging: útil para producción y depuración
# --------------------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} {process:d} {thread:d}: {message}",
            "style": "{",
        },
        "simple": {"format": "[{levelname}] {message}", "style": "{"},
    },
    "filters": {
        "sanitize_secrets": {
            "()": "core.infra.logging_filters.SanitizeSecretsFilter",
        },
        "sanitize_pii": {
            "()": "core.infra.logging_filters.SanitizePIIFilter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose" if not DEBUG else "simple",
            "filters": ["sanitize_secrets", "sanitize_pii"],
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": BASE_DIR / "logs" / "stockwatch.log",
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 10,
            "formatter": "verbose",
            "filters": ["sanitize_secrets", "sanitize_pii"],
        },
        "error_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": BASE_DIR / "logs" / "errors.log",
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "verbose",
            "level": "ERROR",
            "filters": ["sanitize_secrets", "sanitize_pii"],
        },
    },
    "root": {
        "handlers": ["console", "file", "error_file"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {
            "level": os.getenv("DB_LOG_LEVEL", "WARNING" if not DEBUG else "INFO"),
            "handlers": ["console", "file"],
            "propagate": False,
        },
        # Barridos y handlers de inventario: siempre al menos INFO para auditar conteos
        "marketplace": {
            "level": os.getenv("INVENTORY_LOG_LEVEL", "INFO"),
            "handlers": ["console", "file", "error_file"],
            "propagate": False,
        },
    },
}

# Crear directorio de logs si no existe
(BASE_DIR / "logs").mkdir(exist_ok=True)

# --------------------------------------------------------------------------------------
# Sentry (opcional)
# --------------------------------------------------------------------------------------
SENTRY_DSN = os.getenv("SENTRY_DSN", "")
if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[
            DjangoIntegration(),
            CeleryIntegration(),
        ],
        traces_sample_rate=float(
            os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        send_default_pii=False,
        environment=os.getenv(
            "SENTRY_ENV", "production" if not DEBUG else "development"),
        release=os.getenv("GIT_COMMIT", "local"),
    )
