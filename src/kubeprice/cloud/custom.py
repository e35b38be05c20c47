"""
custom.py
CustomProvider: the reference pricing backend. Prices come from the deployment's
pricing record and are served from an in-memory table of tiers.
"""

import json
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from kubeprice.cloud.errors import PricingConfigError, PricingNotLoadedError
from kubeprice.cloud.keys import (
    DEFAULT_FEATURES,
    GPU_SUFFIX,
    SPOT_FEATURES,
    CustomProviderKey,
    Key,
    PVKey,
    StoragePVKey,
)
from kubeprice.cloud.models import Network, Node, NodePrice, OutOfClusterAllocation, PV
from kubeprice.cloud.provider import ConfigPatch, Provider
from kubeprice.cloud.rwlock import ReadWriteLock
from kubeprice.utils.pricing_config import (
    PricingRecord,
    apply_pricing_patch,
    get_default_pricing_data,
    save_pricing_data,
)
from kubeprice.utils.settings import Settings

logger = logging.getLogger(__name__)

GPU_TIER = DEFAULT_FEATURES + GPU_SUFFIX


def _decode_patch(patch: ConfigPatch) -> Mapping[str, Any]:
    if isinstance(patch, Mapping):
        return patch
    try:
        if hasattr(patch, "read"):
            data = json.load(patch)
        else:
            data = json.loads(patch)
    except (TypeError, ValueError) as e:
        raise PricingConfigError(f"Could not decode config update: {e}") from e
    if not isinstance(data, dict):
        raise PricingConfigError("Config update must be a JSON object of field names to values")
    return data


def _parse_egress(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise PricingConfigError(f"Invalid {name} price {value!r}") from e


class CustomProvider(Provider):
    """
    Serves prices from three tiers built off the pricing record:
    "default", "default,spot" and "default,gpu".

    download_pricing_data() must have run at least once before node_pricing()
    is called.
    """

    provider_tag = "custom"
    management_platform = ""

    def __init__(self, core_api: Any = None, settings: Optional[Settings] = None):
        self.core_api = core_api
        self.settings = settings or Settings()
        self.pricing: Dict[str, NodePrice] = {}
        self.spot_label = ""
        self.spot_label_value = ""
        self.gpu_label = ""
        self.gpu_label_value = ""
        self._lock = ReadWriteLock()
        self._update_lock = threading.Lock()

    def _load_record(self) -> PricingRecord:
        return get_default_pricing_data(self.settings.pricing_file, self.settings.config_path)

    # --- config -----------------------------------------------------------

    def get_config(self) -> PricingRecord:
        return self._load_record()

    def update_config(self, patch: ConfigPatch, update_type: str = "") -> PricingRecord:
        """
        Merge a partial update into the pricing record, persist it, then rebuild
        the pricing table. Both steps finish before this returns.
        """
        fields = _decode_patch(patch)
        # Serialises load/patch/save so overlapping updates merge instead of
        # overwriting each other.
        with self._update_lock:
            record = self._load_record()
            apply_pricing_patch(record, fields)
            save_pricing_data(record, self.settings.pricing_file, self.settings.config_path)
            logger.info("Updated pricing config fields: %s", ", ".join(sorted(fields)) or "(none)")
            self.download_pricing_data()
        return record

    # --- pricing table ----------------------------------------------------

    def download_pricing_data(self) -> None:
        with self._lock.write_locked():
            record = self._load_record()
            self.spot_label = record.spot_label
            self.spot_label_value = record.spot_label_value
            self.gpu_label = record.gpu_label
            self.gpu_label_value = record.gpu_label_value
            self.pricing[DEFAULT_FEATURES] = NodePrice(cpu=record.cpu, ram=record.ram)
            self.pricing[SPOT_FEATURES] = NodePrice(cpu=record.spot_cpu, ram=record.spot_ram)
            self.pricing[GPU_TIER] = NodePrice(cpu=record.cpu, ram=record.ram, gpu=record.gpu)
        logger.debug("Refreshed pricing table for %s provider", self.provider_tag)

    def node_pricing(self, key: Key) -> Node:
        with self._lock.read_locked():
            tier = key.features()
            if tier not in self.pricing:
                tier = DEFAULT_FEATURES
            gpu_count = ""
            if key.gpu_type() != "":
                # Only one GPU SKU and one GPU per node are priced.
                tier += GPU_SUFFIX
                if tier not in self.pricing:
                    tier = GPU_TIER
                gpu_count = "1"
            price = self.pricing.get(tier)
            if price is None:
                raise PricingNotLoadedError(
                    f"No {tier!r} pricing tier; call download_pricing_data() before looking up prices"
                )
            return Node(vcpu_cost=price.cpu, ram_cost=price.ram, gpu_cost=price.gpu, gpu=gpu_count)

    def all_node_pricing(self) -> Mapping[str, NodePrice]:
        with self._lock.read_locked():
            return MappingProxyType(dict(self.pricing))

    def get_key(self, labels: Mapping[str, str]) -> Key:
        with self._lock.read_locked():
            return CustomProviderKey(
                spot_label=self.spot_label,
                spot_label_value=self.spot_label_value,
                gpu_label=self.gpu_label,
                gpu_label_value=self.gpu_label_value,
                labels=dict(labels or {}),
            )

    def get_pv_key(self, pv: Any, parameters: Optional[Mapping[str, str]] = None) -> PVKey:
        metadata = getattr(pv, "metadata", None)
        spec = getattr(pv, "spec", None)
        return StoragePVKey(
            storage_class_name=getattr(spec, "storage_class_name", None) or "",
            labels=dict(getattr(metadata, "labels", None) or {}),
            parameters=dict(parameters or {}),
        )

    def pv_pricing(self, pv_key: PVKey) -> PV:
        record = self._load_record()
        return PV(cost=record.storage)

    def network_pricing(self) -> Network:
        record = self._load_record()
        return Network(
            zone_network_egress_cost=_parse_egress("zoneNetworkEgress", record.zone_network_egress),
            region_network_egress_cost=_parse_egress("regionNetworkEgress", record.region_network_egress),
            internet_network_egress_cost=_parse_egress("internetNetworkEgress", record.internet_network_egress),
        )

    # --- cluster ----------------------------------------------------------

    def cluster_info(self) -> Dict[str, str]:
        record = self.get_config()
        info: Dict[str, str] = {}
        if record.cluster_name:
            info["name"] = record.cluster_name
        if self.settings.cluster_id:
            info["id"] = self.settings.cluster_id
        info["provider"] = self.provider_tag
        return info

    def get_management_platform(self) -> str:
        return self.management_platform

    def get_local_storage_query(self) -> str:
        return ""

    def add_service_key(self, values: Mapping[str, Any]) -> None:
        return None

    def get_disks(self) -> Optional[bytes]:
        return None

    def external_allocations(self, start: str, end: str, aggregator: str) -> List[OutOfClusterAllocation]:
        return []
