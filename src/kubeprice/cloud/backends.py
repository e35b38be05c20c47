"""
backends.py
Cloud-flavoured providers chosen by the selector. Billing API integrations are
not wired in, so each one prices from the reference table and only reports its
own identity.
"""

import logging
from typing import Any, Optional

from kubeprice.cloud.custom import CustomProvider
from kubeprice.cloud.provider import KEY_UPDATE_TYPE, ConfigPatch
from kubeprice.utils.pricing_config import PricingRecord
from kubeprice.utils.settings import Settings

logger = logging.getLogger(__name__)


class GCPProvider(CustomProvider):
    provider_tag = "GCP"
    management_platform = "gke"

    def __init__(self, core_api: Any = None, api_key: str = "", settings: Optional[Settings] = None):
        super().__init__(core_api, settings)
        self.api_key = api_key


class AWSProvider(CustomProvider):
    provider_tag = "AWS"
    management_platform = "eks"

    def update_config(self, patch: ConfigPatch, update_type: str = "") -> PricingRecord:
        if update_type == KEY_UPDATE_TYPE:
            logger.info("Applying Athena settings update")
        return super().update_config(patch, update_type)


class AzureProvider(CustomProvider):
    provider_tag = "azure"
    management_platform = "aks"
