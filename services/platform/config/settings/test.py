"""
Test settings for Arrears Platform
Fast, isolated testing environment.
"""

from .base import *

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False

# ===============================================================================
# TEST DATABASE (In-memory for speed)
# ===============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# ===============================================================================
# LOGGING (Minimal for tests)
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "CRITICAL",
    },
}

# ===============================================================================
# LOCALIZATION
# ===============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Europe/Bucharest"  # Keep same timezone as production for consistency
USE_I18N = True
USE_TZ = True

# ===============================================================================
# SECURITY (Relaxed for tests)
# ===============================================================================

SECRET_KEY = "django-test-key-not-secure"  # noqa: S105

# Explicit test flag
TESTING = True

# ===============================================================================
# USAGE BILLING (Deterministic defaults for tests)
# ===============================================================================

BILLING_DEFAULT_CURRENCY = "RON"
BILLING_USAGE_ITEM_GROUPING = "merged"
BILLING_USAGE_MAX_SUB_PERIODS = 1200
