import json
from types import SimpleNamespace

import requests
from typer.testing import CliRunner

from kubeprice.cloud import selector
from kubeprice.commands import cluster
from kubeprice.main import app

runner = CliRunner()


def _env(tmp_path):
    return {"CONFIG_PATH": str(tmp_path), "SQL_ADDRESS": str(tmp_path / "meta.db"), "CLUSTER_ID": "c1", "KUBEPRICE_LOG_LEVEL": "WARNING"}


def test_pricing_all_json(tmp_path):
    result = runner.invoke(app, ["pricing", "all", "--output", "json"], env=_env(tmp_path))
    assert result.exit_code == 0, result.output
    assert set(json.loads(result.stdout)) == {"default", "default,spot", "default,gpu"}


def test_config_update_then_node_pricing(tmp_path):
    env = _env(tmp_path)
    result = runner.invoke(app, ["config", "update", "spotLabel=lifecycle", "spotLabelValue=spot", "SpotCPU=0.002"], env=env)
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["pricing", "node", "-l", "lifecycle=spot", "--output", "json"], env=env)
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["CPUHourlyCost"] == "0.002"


def test_config_update_unknown_field(tmp_path):
    result = runner.invoke(app, ["config", "update", "bogus=1"], env=_env(tmp_path))
    assert result.exit_code == 1


def test_cluster_register(tmp_path):
    env = _env(tmp_path)
    result = runner.invoke(app, ["cluster", "register", "--name", "prod"], env=env)
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"cluster_id": "c1", "cluster_name": "prod"}

    result = runner.invoke(app, ["cluster", "register", "--name", "other"], env=env)
    assert json.loads(result.stdout)["cluster_name"] == "prod"


def test_network_json(tmp_path):
    result = runner.invoke(app, ["pricing", "network", "--output", "json"], env=_env(tmp_path))
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["ZoneNetworkEgressCost"] == 0.01


def test_pricing_pv_json(tmp_path):
    result = runner.invoke(
        app, ["pricing", "pv", "--storage-class", "standard", "--region", "us-east1", "--output", "json"],
        env=_env(tmp_path),
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["hourlyCost"] == "0.00005479452"


def test_config_show_json_seeds_defaults(tmp_path):
    result = runner.invoke(app, ["config", "show", "--output", "json"], env=_env(tmp_path))
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["CPU"] == "0.031611"
    assert data["description"] == "Default prices based on GCP us-central1"
    assert (tmp_path / "default.json").exists()


def test_cluster_info(tmp_path):
    env = _env(tmp_path)
    runner.invoke(app, ["config", "update", "clusterName=prod"], env=env)

    result = runner.invoke(app, ["cluster", "info"], env=env)
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"name": "prod", "id": "c1", "provider": "custom"}


class _FakeCoreApi:
    def __init__(self, provider_id):
        self.provider_id = provider_id

    def list_node(self):
        node = SimpleNamespace(spec=SimpleNamespace(provider_id=self.provider_id))
        return SimpleNamespace(items=[node])


def _off_gce(monkeypatch):
    def unreachable(*a, **kw):
        raise requests.ConnectionError("no route")

    monkeypatch.delenv("GCE_METADATA_HOST", raising=False)
    monkeypatch.setattr(selector.requests, "get", unreachable)


def test_cluster_detect(tmp_path, monkeypatch):
    _off_gce(monkeypatch)
    monkeypatch.setattr(cluster, "load_core_api", lambda context=None: _FakeCoreApi("aws:///us-east-1a/i-0abc"))

    result = runner.invoke(app, ["cluster", "detect"], env=_env(tmp_path))
    assert result.exit_code == 0, result.output
    assert "AWSProvider" in result.stdout


def test_cluster_detect_on_gce_without_key(tmp_path, monkeypatch):
    monkeypatch.setattr(cluster, "load_core_api", lambda context=None: _FakeCoreApi("gce://p/z/n"))
    env = dict(_env(tmp_path), GCE_METADATA_HOST="metadata.internal", CLOUD_PROVIDER_API_KEY="")

    result = runner.invoke(app, ["cluster", "detect"], env=env)
    assert result.exit_code == 1
    assert "Supply a GCP Key" in result.output


def test_bad_settings_file_is_reported(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("colour: blue\n")

    result = runner.invoke(app, ["--settings", str(path), "pricing", "all"], env=_env(tmp_path))
    assert result.exit_code == 2
    assert "colour" in result.output
