"""
models.py
Price structures exchanged between providers and the cost model. Providers fill
them out best-effort; empty strings mean "unknown".
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class NodePrice:
    """One pricing tier in a provider's cache."""
    cpu: str = ""
    ram: str = ""
    gpu: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"CPU": self.cpu, "RAM": self.ram, "GPU": self.gpu}


@dataclass
class Node:
    cost: str = ""
    vcpu: str = ""
    vcpu_cost: str = ""
    ram: str = ""
    ram_bytes: str = ""
    ram_cost: str = ""
    storage: str = ""
    storage_cost: str = ""
    uses_base_cpu_price: bool = False
    # Base prices are used to derive an implicit RAM GB/hr price when none is given.
    base_cpu_price: str = ""
    base_ram_price: str = ""
    base_gpu_price: str = ""
    usage_type: str = ""
    gpu: str = ""  # number of GPUs on the instance
    gpu_name: str = ""
    gpu_cost: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hourlyCost": self.cost,
            "CPU": self.vcpu,
            "CPUHourlyCost": self.vcpu_cost,
            "RAM": self.ram,
            "RAMBytes": self.ram_bytes,
            "RAMGBHourlyCost": self.ram_cost,
            "storage": self.storage,
            "storageHourlyCost": self.storage_cost,
            "usesDefaultPrice": self.uses_base_cpu_price,
            "baseCPUPrice": self.base_cpu_price,
            "baseRAMPrice": self.base_ram_price,
            "baseGPUPrice": self.base_gpu_price,
            "usageType": self.usage_type,
            "gpu": self.gpu,
            "gpuName": self.gpu_name,
            "gpuCost": self.gpu_cost,
        }


@dataclass
class PV:
    cost: str = ""
    cost_per_io: str = ""
    storage_class: str = ""
    size: str = ""
    region: str = ""
    parameters: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hourlyCost": self.cost,
            "costPerIOOperation": self.cost_per_io,
            "storageClass": self.storage_class,
            "size": self.size,
            "region": self.region,
            "parameters": dict(self.parameters),
        }


@dataclass
class Network:
    zone_network_egress_cost: float = 0.0
    region_network_egress_cost: float = 0.0
    internet_network_egress_cost: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "ZoneNetworkEgressCost": self.zone_network_egress_cost,
            "RegionNetworkEgressCost": self.region_network_egress_cost,
            "InternetNetworkEgressCost": self.internet_network_egress_cost,
        }


@dataclass
class OutOfClusterAllocation:
    """A cloud cost tagged to a cluster owner but incurred outside Kubernetes."""
    aggregator: str
    environment: str
    service: str
    cost: float
    cluster: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
