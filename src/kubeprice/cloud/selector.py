"""
selector.py
Decide which Provider implementation applies to the cluster we are running in.
"""

import logging
import os
from typing import Any, Callable, Optional

import requests
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from kubeprice.cloud.backends import AWSProvider, AzureProvider, GCPProvider
from kubeprice.cloud.custom import CustomProvider
from kubeprice.cloud.errors import ConfigurationError
from kubeprice.cloud.provider import Provider
from kubeprice.utils.settings import Settings

logger = logging.getLogger(__name__)

METADATA_IP = "169.254.169.254"
METADATA_FLAVOR = "Google"


def on_gce(timeout: float = 1.0, metadata_host: Optional[str] = None) -> bool:
    """Report whether the process runs on a Google Compute Engine VM."""
    host = metadata_host if metadata_host is not None else os.environ.get("GCE_METADATA_HOST", "")
    if host:
        return True
    try:
        r = requests.get(
            f"http://{METADATA_IP}",
            headers={"Metadata-Flavor": METADATA_FLAVOR},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.debug("GCE metadata probe failed: %s", e)
        return False
    return r.headers.get("Metadata-Flavor") == METADATA_FLAVOR


def load_core_api(context: Optional[str] = None) -> Any:
    """Build a CoreV1Api client, preferring in-cluster credentials over kubeconfig."""
    try:
        k8s_config.load_incluster_config()
    except ConfigException:
        if context:
            k8s_config.load_kube_config(context=context)
        else:
            k8s_config.load_kube_config()
    return k8s_client.CoreV1Api()


def new_provider(core_api: Any, api_key: str = "", settings: Optional[Settings] = None,
                 metadata_probe: Callable[[], bool] = on_gce) -> Provider:
    """
    Look at the metadata server and the node spec to pick a provider.

    A GCE environment without `api_key` is a configuration error. Errors from
    listing nodes propagate; an empty node list or an unrecognised provider ID
    falls back to CustomProvider.
    """
    if metadata_probe():
        logger.debug("metadata reports we are in GCE")
        if not api_key:
            raise ConfigurationError("Supply a GCP Key to start getting data")
        return GCPProvider(core_api, api_key=api_key, settings=settings)

    nodes = core_api.list_node()
    items = getattr(nodes, "items", None) or []
    if not items:
        logger.info("No nodes listed, falling back to default provider")
        return CustomProvider(core_api, settings=settings)

    provider_id = (getattr(items[0].spec, "provider_id", None) or "").lower()
    if provider_id.startswith("aws"):
        logger.info('Found ProviderID starting with "aws", using AWS Provider')
        return AWSProvider(core_api, settings=settings)
    if provider_id.startswith("azure"):
        logger.info('Found ProviderID starting with "azure", using Azure Provider')
        return AzureProvider(core_api, settings=settings)

    logger.info("Unsupported provider, falling back to default")
    return CustomProvider(core_api, settings=settings)
