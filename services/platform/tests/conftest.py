# ===============================================================================
# PYTEST CONFIGURATION FOR ARREARS PLATFORM
# ===============================================================================
"""
Global test configuration for Arrears Platform.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- Naming convention: test_{area}_{feature}.py

Run specific app tests: pytest tests/billing/
"""

import os

import django
import pytest


def pytest_configure():
    """Configure Django settings for pytest"""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.test")

    # Configure Django
    django.setup()


# ===============================================================================
# PYTEST FIXTURES
# ===============================================================================

@pytest.fixture(autouse=True)
def _clear_billing_run_id():
    """Billing run IDs are thread-local; never leak one between tests."""
    from apps.common.logging import clear_run_id  # noqa: PLC0415

    yield
    clear_run_id()
