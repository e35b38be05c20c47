"""
HTTP surface over a Provider: cluster identity, pricing tables and config updates.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException

from kubeprice.cloud.errors import ClusterMetaError, PricingConfigError, PricingNotLoadedError
from kubeprice.cloud.provider import Provider
from kubeprice.utils.cluster_meta import ClusterMetaStore
from kubeprice.utils.settings import Settings

LOG = logging.getLogger("kubeprice.server")


def register_cluster(provider: Provider, settings: Settings, store: ClusterMetaStore) -> None:
    """Record this cluster's id and name in the metadata store when remote write is on."""
    if not settings.remote_enabled or not settings.cluster_id:
        return
    name = provider.get_config().cluster_name or settings.cluster_id
    try:
        store.get_or_create(settings.cluster_id, name)
    except ClusterMetaError:
        LOG.exception("Failed to register cluster %s", settings.cluster_id)


def create_app(provider: Provider, settings: Optional[Settings] = None,
               store: Optional[ClusterMetaStore] = None) -> FastAPI:
    settings = settings or Settings()
    store = store or ClusterMetaStore.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        provider.download_pricing_data()
        register_cluster(provider, settings, store)
        yield

    app = FastAPI(title="kubeprice", lifespan=lifespan)

    @app.get("/clusterInfo")
    def cluster_info() -> Dict[str, str]:
        return provider.cluster_info()

    @app.get("/allNodePricing")
    def all_node_pricing() -> Dict[str, Any]:
        return {tier: price.to_dict() for tier, price in provider.all_node_pricing().items()}

    @app.post("/nodePricing")
    def node_pricing(labels: Optional[Dict[str, str]] = Body(default=None)) -> Dict[str, Any]:
        try:
            return provider.node_pricing(provider.get_key(labels or {})).to_dict()
        except PricingNotLoadedError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/networkPricing")
    def network_pricing() -> Dict[str, float]:
        try:
            return provider.network_pricing().to_dict()
        except PricingConfigError as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/getConfigs")
    def get_configs() -> Dict[str, str]:
        return provider.get_config().to_dict()

    @app.post("/updateConfigs")
    def update_configs(payload: Dict[str, Any] = Body(...), updateType: str = "") -> Dict[str, str]:
        try:
            record = provider.update_config(payload, update_type=updateType)
        except PricingConfigError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return record.to_dict()

    return app
