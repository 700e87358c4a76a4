"""
Django settings for Arrears Platform - Base Configuration.
"""

import os
from pathlib import Path

# ===============================================================================
# CORE DJANGO SETTINGS
# ===============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # Up 3 levels to services/platform/

# Application definition
DJANGO_APPS: list[str] = [
    "django.contrib.contenttypes",
]

LOCAL_APPS: list[str] = [
    "apps.billing",
]

INSTALLED_APPS: list[str] = DJANGO_APPS + LOCAL_APPS

# ===============================================================================
# DATABASE CONFIGURATION
# ===============================================================================

# The usage billing core is database-free; persistence belongs to the invoice store.
DATABASES: dict[str, dict[str, str]] = {}

# ===============================================================================
# INTERNATIONALIZATION & LOCALIZATION
# ===============================================================================

LANGUAGE_CODE = "en"
TIME_ZONE = os.environ.get("PLATFORM_TIME_ZONE", "Europe/Bucharest")
USE_I18N = True
USE_TZ = True

# ===============================================================================
# SECURITY SETTINGS (Base - override in prod.py)
# ===============================================================================

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY")
if not SECRET_KEY:
    # Development fallback - never use this in production
    import warnings

    warnings.warn(
        "🚨 SECURITY WARNING: Using default SECRET_KEY. Set DJANGO_SECRET_KEY environment variable for production!",
        UserWarning,
        stacklevel=2,
    )
    SECRET_KEY = "django-insecure-dev-key-only-change-in-production-or-tests"  # noqa: S105


def validate_production_secret_key() -> None:
    """Validate SECRET_KEY meets production security requirements"""
    if SECRET_KEY and SECRET_KEY.startswith("django-insecure-"):
        raise ValueError(
            "🔥 CRITICAL SECURITY ERROR: Cannot use insecure SECRET_KEY in production! "
            "Generate a secure key: python -c 'from django.core.management.utils import get_random_secret_key; print(get_random_secret_key())'"
        )


# ===============================================================================
# USAGE BILLING CONFIGURATION 💰
# ===============================================================================

# Currency used when a caller does not supply one
BILLING_DEFAULT_CURRENCY = os.environ.get("BILLING_DEFAULT_CURRENCY", "RON")

# "merged": one usage item per sub-period; "per_unit": one per sub-period and unit
BILLING_USAGE_ITEM_GROUPING = os.environ.get("BILLING_USAGE_ITEM_GROUPING", "merged")

# Guard against runaway boundary generation (100 years of monthly periods)
BILLING_USAGE_MAX_SUB_PERIODS = int(os.environ.get("BILLING_USAGE_MAX_SUB_PERIODS", "1200"))
