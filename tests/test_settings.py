import pytest

from kubeprice.cloud.errors import ConfigurationError
from kubeprice.utils.settings import Settings


def test_defaults():
    s = Settings.from_env({})
    assert s.config_path == "/models/"
    assert s.remote_enabled is False
    assert str(s.pricing_path) == "/models/default.json"


def test_from_env():
    s = Settings.from_env({
        "CONFIG_PATH": "/etc/kubeprice",
        "CLUSTER_ID": "c1",
        "REMOTE_WRITE_ENABLED": "true",
        "SQL_ADDRESS": "/var/lib/kubeprice/meta.db",
    })
    assert s.config_path == "/etc/kubeprice"
    assert s.cluster_id == "c1"
    assert s.remote_enabled is True
    assert s.sql_address == "/var/lib/kubeprice/meta.db"


def test_from_file_with_env_override(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("config_path: /srv/models\nCLUSTER_ID: from-file\nremote_enabled: yes\n")

    s = Settings.from_file(str(path), environ={"CLUSTER_ID": "from-env"})

    assert s.config_path == "/srv/models"
    assert s.cluster_id == "from-env"
    assert s.remote_enabled is True


def test_from_file_rejects_unknown_keys(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("colour: blue\n")
    with pytest.raises(ConfigurationError, match="colour"):
        Settings.from_file(str(path), environ={})


def test_from_file_null_values_keep_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("cluster_id: ~\nSQL_ADDRESS:\nconfig_path: /srv/models\n")

    s = Settings.from_file(str(path), environ={})

    assert s.cluster_id == ""
    assert s.sql_address == "kubeprice.db"
    assert s.config_path == "/srv/models"


def test_from_file_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Could not read"):
        Settings.from_file(str(tmp_path / "nope.yaml"), environ={})
