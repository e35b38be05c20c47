"""
pricing_config.py
Module for loading, persisting and patching the baseline pricing record.

The record is a flat set of string-valued prices and labels stored as JSON, one
file per deployment. Monetary values stay strings so no precision is lost on a
round trip; callers parse them when they need numbers.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Union

from kubeprice.cloud.errors import (
    FieldNotSettableError,
    FieldTypeMismatchError,
    NoSuchFieldError,
    PricingConfigError,
)
from kubeprice.utils.settings import DEFAULT_CONFIG_PATH, DEFAULT_PRICING_FILE

logger = logging.getLogger(__name__)


@dataclass
class PricingRecord:
    """Baseline per-resource prices plus the per-backend settings that ride along."""
    provider: str = ""
    description: str = ""
    cpu: str = ""
    spot_cpu: str = ""
    ram: str = ""
    spot_ram: str = ""
    gpu: str = ""
    spot_gpu: str = ""
    storage: str = ""
    zone_network_egress: str = ""
    region_network_egress: str = ""
    internet_network_egress: str = ""
    spot_label: str = ""
    spot_label_value: str = ""
    gpu_label: str = ""
    gpu_label_value: str = ""
    service_key_name: str = ""
    service_key_secret: str = ""
    spot_data_region: str = ""
    spot_data_bucket: str = ""
    spot_data_prefix: str = ""
    project_id: str = ""
    athena_bucket_name: str = ""
    athena_region: str = ""
    athena_database: str = ""
    athena_table: str = ""
    billing_data_dataset: str = ""
    custom_prices_enabled: str = ""
    azure_subscription_id: str = ""
    azure_client_id: str = ""
    azure_client_secret: str = ""
    azure_tenant_id: str = ""
    currency_code: str = ""
    discount: str = ""
    cluster_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Serialise using the JSON field names of the config file."""
        values = asdict(self)
        out: Dict[str, str] = {}
        for spec in PRICING_FIELDS.values():
            value = values[spec.attr]
            if spec.omit_empty and value == "":
                continue
            out[spec.json_name] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingRecord":
        """Build a record from config-file JSON. Unknown keys are ignored."""
        by_json = {spec.json_name: spec for spec in PRICING_FIELDS.values()}
        record = cls()
        for key, value in data.items():
            spec = by_json.get(key)
            if spec is None:
                logger.debug("Ignoring unknown pricing config key %s", key)
                continue
            if not isinstance(value, spec.value_type):
                raise PricingConfigError(
                    f"Pricing config key {key} must be a {spec.value_type.__name__}, got {type(value).__name__}"
                )
            setattr(record, spec.attr, value)
        return record


class FieldSpec(NamedTuple):
    attr: str
    json_name: str
    value_type: type = str
    omit_empty: bool = False
    settable: bool = True


def _f(attr: str, json_name: str, omit_empty: bool = False) -> FieldSpec:
    return FieldSpec(attr=attr, json_name=json_name, omit_empty=omit_empty)


# Canonical field name (first letter upper-cased) -> field spec.
PRICING_FIELDS: Dict[str, FieldSpec] = {
    "Provider": _f("provider", "provider"),
    "Description": _f("description", "description"),
    "CPU": _f("cpu", "CPU"),
    "SpotCPU": _f("spot_cpu", "spotCPU"),
    "RAM": _f("ram", "RAM"),
    "SpotRAM": _f("spot_ram", "spotRAM"),
    "GPU": _f("gpu", "GPU"),
    "SpotGPU": _f("spot_gpu", "spotGPU"),
    "Storage": _f("storage", "storage"),
    "ZoneNetworkEgress": _f("zone_network_egress", "zoneNetworkEgress"),
    "RegionNetworkEgress": _f("region_network_egress", "regionNetworkEgress"),
    "InternetNetworkEgress": _f("internet_network_egress", "internetNetworkEgress"),
    "SpotLabel": _f("spot_label", "spotLabel", omit_empty=True),
    "SpotLabelValue": _f("spot_label_value", "spotLabelValue", omit_empty=True),
    "GpuLabel": _f("gpu_label", "gpuLabel", omit_empty=True),
    "GpuLabelValue": _f("gpu_label_value", "gpuLabelValue", omit_empty=True),
    "ServiceKeyName": _f("service_key_name", "awsServiceKeyName", omit_empty=True),
    "ServiceKeySecret": _f("service_key_secret", "awsServiceKeySecret", omit_empty=True),
    "SpotDataRegion": _f("spot_data_region", "awsSpotDataRegion", omit_empty=True),
    "SpotDataBucket": _f("spot_data_bucket", "awsSpotDataBucket", omit_empty=True),
    "SpotDataPrefix": _f("spot_data_prefix", "awsSpotDataPrefix", omit_empty=True),
    "ProjectID": _f("project_id", "projectID", omit_empty=True),
    "AthenaBucketName": _f("athena_bucket_name", "athenaBucketName"),
    "AthenaRegion": _f("athena_region", "athenaRegion"),
    "AthenaDatabase": _f("athena_database", "athenaDatabase"),
    "AthenaTable": _f("athena_table", "athenaTable"),
    "BillingDataDataset": _f("billing_data_dataset", "billingDataDataset", omit_empty=True),
    "CustomPricesEnabled": _f("custom_prices_enabled", "customPricesEnabled"),
    "AzureSubscriptionID": _f("azure_subscription_id", "azureSubscriptionID"),
    "AzureClientID": _f("azure_client_id", "azureClientID"),
    "AzureClientSecret": _f("azure_client_secret", "azureClientSecret"),
    "AzureTenantID": _f("azure_tenant_id", "azureTenantID"),
    "CurrencyCode": _f("currency_code", "currencyCode"),
    "Discount": _f("discount", "discount"),
    "ClusterName": _f("cluster_name", "clusterName"),
}


def _make_setter(spec: FieldSpec) -> Callable[[PricingRecord, Any], None]:
    def setter(record: PricingRecord, value: Any) -> None:
        setattr(record, spec.attr, value)
    return setter


FIELD_SETTERS: Dict[str, Callable[[PricingRecord, Any], None]] = {
    name: _make_setter(spec) for name, spec in PRICING_FIELDS.items()
}


def canonical_field_name(name: str) -> str:
    """Upper-case the first letter so `spotLabel` and `SpotLabel` name the same field."""
    return name[:1].upper() + name[1:]


def _check_field(name: str, value: Any) -> FieldSpec:
    spec = PRICING_FIELDS.get(name)
    if spec is None:
        raise NoSuchFieldError(name)
    if not spec.settable:
        raise FieldNotSettableError(name)
    if not isinstance(value, spec.value_type):
        raise FieldTypeMismatchError(name)
    return spec


def set_custom_pricing_field(record: PricingRecord, name: str, value: Any) -> None:
    """Set one field by its canonical name, validating name, mutability and type."""
    _check_field(name, value)
    FIELD_SETTERS[name](record, value)


def apply_pricing_patch(record: PricingRecord, patch: Mapping[str, Any]) -> PricingRecord:
    """
    Apply a partial update to `record` in place.

    Every entry is validated before any field is written, so a rejected patch
    leaves the record exactly as it was.
    """
    updates = []
    for key, value in patch.items():
        name = canonical_field_name(key)
        _check_field(name, value)
        updates.append((name, value))
    for name, value in updates:
        FIELD_SETTERS[name](record, value)
    return record


def default_pricing_record(fname: str = DEFAULT_PRICING_FILE) -> PricingRecord:
    return PricingRecord(
        provider=fname,
        description="Default prices based on GCP us-central1",
        cpu="0.031611",
        spot_cpu="0.006655",
        ram="0.004237",
        spot_ram="0.000892",
        gpu="0.95",
        storage="0.00005479452",
        zone_network_egress="0.01",
        region_network_egress="0.01",
        internet_network_egress="0.12",
        custom_prices_enabled="false",
    )


def _resolve_path(fname: str, config_path: Optional[Union[str, Path]]) -> Path:
    return Path(config_path or DEFAULT_CONFIG_PATH) / fname


def save_pricing_data(record: PricingRecord, fname: str = DEFAULT_PRICING_FILE,
                      config_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Persist `record` as JSON and return the path written.

    The JSON goes to a temporary file beside the target which is then renamed
    over it, so readers see either the old record or the new one.
    """
    path = _resolve_path(fname, config_path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(record.to_dict(), fh)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
    logger.debug("Wrote pricing config to %s", path)
    return path


def get_default_pricing_data(fname: str = DEFAULT_PRICING_FILE,
                             config_path: Optional[Union[str, Path]] = None) -> PricingRecord:
    """
    Load the pricing record from `<config_path>/<fname>`.

    When the file does not exist a default record is synthesised, written to
    that location and returned. Any other I/O failure propagates.
    """
    path = _resolve_path(fname, config_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No pricing config at %s, writing defaults", path)
        record = default_pricing_record(fname)
        save_pricing_data(record, fname, config_path)
        return record

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PricingConfigError(f"Could not parse pricing config {path}: {e}") from e
    if not isinstance(data, dict):
        raise PricingConfigError(f"Pricing config {path} must be a JSON object")
    return PricingRecord.from_dict(data)
