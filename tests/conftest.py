import pytest

from kubeprice.cloud.custom import CustomProvider
from kubeprice.utils.settings import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        config_path=str(tmp_path),
        cluster_id="c1",
        sql_address=str(tmp_path / "meta.db"),
    )


@pytest.fixture
def provider(settings):
    p = CustomProvider(settings=settings)
    p.download_pricing_data()
    return p
