"""
OPS – Django Settings (Infrastructure Only)
============================================
Django hosts the ORM-backed OrderStorage (core.storage) and nothing else.
The engines never import Django; only DjangoOrderStorage does.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("OPS_SECRET_KEY", "ops-dev-key-replace-before-deployment")

DEBUG = os.environ.get("OPS_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── OPS Modules ───────────────────────────────────────
    "core.storage",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for a single shop. Point OPS_DATABASE_PATH at a shared file
# when several terminals in one branch save orders.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("OPS_DATABASE_PATH", str(BASE_DIR / "ops.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = False
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "ops": {
            "handlers": ["console"],
            "level": os.environ.get("OPS_LOG_LEVEL", "INFO"),
        },
    },
}
