from pathlib import Path
import os

from dotenv import load_dotenv

# Carga de variables de entorno temprana
load_dotenv()


def validate_required_env_vars():
    """
    Valida que todas las variables de entorno críticas estén configuradas.
    """
    required_vars = {
        "SECRET_KEY": "Clave secreta de Django",
    }

    # Validar DB: Si tenemos DATABASE_URL, no exigimos DB_PASSWORD por separado
    if not os.getenv("DATABASE_URL") and not os.getenv("DB_PASSWORD"):
        required_vars["DB_PASSWORD"] = "Contraseña de base de datos (o DATABASE_URL)"

    # En producción, validar más variables
    if os.getenv("DEBUG", "0") not in ("1", "true", "True"):
        required_vars["REDIS_URL"] = "URL de Redis"

        # CELERY_BROKER_URL: Opcional si REDIS_URL está presente
        if not os.getenv("CELERY_BROKER_URL") and not os.getenv("REDIS_URL"):
            required_vars["CELERY_BROKER_URL"] = "URL del broker de Celery (o REDIS_URL)"

    missing = []
    for var, description in required_vars.items():
        if not os.getenv(var):
            missing.append(f"{var} ({description})")

    if missing:
        raise RuntimeError(
            "Variables de entorno faltantes:\n"
            + "\n".join(f"  - {var}" for var in missing)
            + "\n\nConfigura estas variables en el archivo .env o como variables de entorno del sistema."
        )


# Validar variables al inicio
validate_required_env_vars()

# --------------------------------------------------------------------------------------
# Paths básicos
# --------------------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --------------------------------------------------------------------------------------
# Claves y modo
# --------------------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY no configurada. Define la variable de entorno antes de iniciar la aplicación.")

DEBUG = os.getenv("DEBUG", "0") in ("1", "true", "True")


# Helper para listas (definido antes de usarse)
def _split_env(name, default=""):
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.replace(",", " ").split() if x.strip()]


def _int_env(name, default):
    """
    Lee un entero de entorno. Un valor malformado no frena el arranque:
    se usa el default.
    """
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


ALLOWED_HOSTS = _split_env("ALLOWED_HOSTS", "localhost 127.0.0.1")

# --------------------------------------------------------------------------------------
# Apps
# --------------------------------------------------------------------------------------
INSTALLED_APPS = [
    # Django
    "django.contrib.auth",
    "django.contrib.contenttypes",

    # Tus apps
    "core",
    "users",
    "marketplace",
    "notifications",
]

# --------------------------------------------------------------------------------------
# Base de datos
# --------------------------------------------------------------------------------------
import dj_database_url  # noqa: E402

DATABASES = {}

if os.getenv("DATABASE_URL"):
    DATABASES["default"] = dj_database_url.config(
        conn_max_age=60,
        conn_health_checks=True,
        ssl_require=not DEBUG,
    )
else:
    # Desarrollo local (variables individuales)
    DATABASES["default"] = {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "stockwatch"),
        "USER": os.getenv("DB_USER", "postgres"),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": _int_env("DB_CONN_MAX_AGE", 60),
        "OPTIONS": {
            "sslmode": os.getenv("DB_SSLMODE", "require" if not DEBUG else "disable"),
            "connect_timeout": 10,
            "client_encoding": "UTF8",
        },
    }

# --------------------------------------------------------------------------------------
# Usuario
# --------------------------------------------------------------------------------------
AUTH_USER_MODEL = "users.CustomUser"

# --------------------------------------------------------------------------------------
# Caché (Redis)
# --------------------------------------------------------------------------------------
REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/1")
if not DEBUG:
    if not REDIS_URL.startswith("rediss://"):
        raise RuntimeError(
            "REDIS_URL debe usar rediss:// (TLS) en producción. "
            f"URL actual: {REDIS_URL.split('@')[-1] if '@' in REDIS_URL else REDIS_URL}"
        )

CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": REDIS_URL,
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            "SOCKET_CONNECT_TIMEOUT": 5,  # segundos
            "SOCKET_TIMEOUT": 5,
        },
        "TIMEOUT": _int_env("CACHE_TIMEOUT", 300),
    }
}

# --------------------------------------------------------------------------------------
# i18n
# --------------------------------------------------------------------------------------
LANGUAGE_CODE = "es-co"
TIME_ZONE = "America/Bogota"
USE_I18N = True
USE_TZ = True

# --------------------------------------------------------------------------------------
# Primary key
# --------------------------------------------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --------------------------------------------------------------------------------------
# Inventario: alertas de stock y reabastecimiento automático
# --------------------------------------------------------------------------------------
# Umbral usado cuando ni la variante ni el producto definen low_stock_threshold.
STOCK_DEFAULT_LOW_STOCK_THRESHOLD = _int_env("STOCK_DEFAULT_LOW_STOCK_THRESHOLD", 5)
# Cantidad pedida por una orden automática cuando el ítem no define reorder_quantity.
STOCK_DEFAULT_REORDER_QUANTITY = _int_env("STOCK_DEFAULT_REORDER_QUANTITY", 50)
# Máximo de escrituras agrupadas en una sola transacción de un barrido.
STOCK_BATCH_WRITE_LIMIT = _int_env("STOCK_BATCH_WRITE_LIMIT", 500)
# Vida del lock de cada barrido (segundos). Debe superar CELERY_TASK_TIME_LIMIT.
STOCK_SWEEP_LOCK_TIMEOUT = _int_env("STOCK_SWEEP_LOCK_TIMEOUT", 900)
# Periodos de los barridos programados (ver settings/celery.py)
STOCK_RECOVERY_CRON_MINUTE = os.getenv("STOCK_RECOVERY_CRON_MINUTE", "0")
STOCK_LOW_STOCK_CRON_HOUR = os.getenv("STOCK_LOW_STOCK_CRON_HOUR", "0")
STOCK_LOW_STOCK_CRON_MINUTE = os.getenv("STOCK_LOW_STOCK_CRON_MINUTE", "0")
