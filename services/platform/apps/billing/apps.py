"""
Django app configuration for Billing app
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class BillingConfig(AppConfig):
    name = "apps.billing"
    verbose_name = "Billing"

    def ready(self) -> None:
        """Validate usage billing settings when Django starts."""
        from . import config as billing_config  # noqa: PLC0415

        grouping = billing_config.get_usage_item_grouping()
        logger.debug(f"💰 [Billing] Usage item grouping: {grouping.value}")
