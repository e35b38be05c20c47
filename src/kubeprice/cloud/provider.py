"""
provider.py
The Provider interface consumed by the cost model. Each cloud backend is one
implementation; CustomProvider in custom.py is the reference one.
"""

from abc import ABC, abstractmethod
from typing import IO, Any, Dict, List, Mapping, Optional, Union

from kubeprice.cloud.keys import Key, PVKey
from kubeprice.cloud.models import Network, Node, OutOfClusterAllocation, PV
from kubeprice.utils.pricing_config import PricingRecord

# Update type understood by the AWS backend for Athena settings.
KEY_UPDATE_TYPE = "athenainfo"

ConfigPatch = Union[Mapping[str, Any], IO[str], IO[bytes], str, bytes]


class Provider(ABC):
    """A Kubernetes pricing backend."""

    @abstractmethod
    def cluster_info(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def add_service_key(self, values: Mapping[str, Any]) -> None:
        ...

    @abstractmethod
    def get_disks(self) -> Optional[bytes]:
        ...

    @abstractmethod
    def node_pricing(self, key: Key) -> Node:
        ...

    @abstractmethod
    def pv_pricing(self, pv_key: PVKey) -> PV:
        ...

    @abstractmethod
    def network_pricing(self) -> Network:
        ...

    @abstractmethod
    def all_node_pricing(self) -> Mapping[str, Any]:
        ...

    @abstractmethod
    def download_pricing_data(self) -> None:
        ...

    @abstractmethod
    def get_key(self, labels: Mapping[str, str]) -> Key:
        ...

    @abstractmethod
    def get_pv_key(self, pv: Any, parameters: Optional[Mapping[str, str]] = None) -> PVKey:
        ...

    @abstractmethod
    def update_config(self, patch: ConfigPatch, update_type: str = "") -> PricingRecord:
        ...

    @abstractmethod
    def get_config(self) -> PricingRecord:
        ...

    @abstractmethod
    def get_management_platform(self) -> str:
        ...

    @abstractmethod
    def get_local_storage_query(self) -> str:
        ...

    @abstractmethod
    def external_allocations(self, start: str, end: str, aggregator: str) -> List[OutOfClusterAllocation]:
        """
        Tagged assets outside the scope of Kubernetes.

        `start` and `end` are dates formatted YYYY-MM-DD; `aggregator` is the
        tag used to allocate the assets (namespace, pod, ...).
        """
