"""
keys.py
Fingerprints that match Kubernetes objects to pricing-table entries.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping

from typing_extensions import Protocol

REGION_LABEL = "topology.kubernetes.io/region"
LEGACY_REGION_LABEL = "failure-domain.beta.kubernetes.io/region"

DEFAULT_FEATURES = "default"
SPOT_FEATURES = "default,spot"
GPU_SUFFIX = ",gpu"


class Key(Protocol):
    def id(self) -> str:
        """An exact-match identifier, empty when the provider has none."""

    def features(self) -> str:
        """Comma separated node metadata that may match a pricing entry."""

    def gpu_type(self) -> str:
        """The GPU name, or an empty string when the node has no GPU."""


class PVKey(Protocol):
    def features(self) -> str: ...

    def get_storage_class(self) -> str: ...


@dataclass(frozen=True)
class CustomProviderKey:
    spot_label: str
    spot_label_value: str
    gpu_label: str
    gpu_label_value: str
    labels: Mapping[str, str] = field(default_factory=dict)

    def id(self) -> str:
        return ""

    def features(self) -> str:
        value = self.labels.get(self.spot_label, "")
        if value != "" and value == self.spot_label_value:
            return SPOT_FEATURES
        return DEFAULT_FEATURES

    def gpu_type(self) -> str:
        return self.labels.get(self.gpu_label, "")


@dataclass(frozen=True)
class StoragePVKey:
    storage_class_name: str
    labels: Mapping[str, str] = field(default_factory=dict)
    parameters: Dict[str, str] = field(default_factory=dict)

    def region(self) -> str:
        return self.labels.get(REGION_LABEL) or self.labels.get(LEGACY_REGION_LABEL, "")

    def features(self) -> str:
        return f"{self.region()},{self.storage_class_name}"

    def get_storage_class(self) -> str:
        return self.storage_class_name
