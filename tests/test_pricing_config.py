import json
import threading
from dataclasses import fields

import pytest

from kubeprice.cloud.errors import (
    FieldNotSettableError,
    FieldTypeMismatchError,
    NoSuchFieldError,
    PricingConfigError,
)
from kubeprice.utils.pricing_config import (
    PRICING_FIELDS,
    PricingRecord,
    apply_pricing_patch,
    canonical_field_name,
    default_pricing_record,
    get_default_pricing_data,
    save_pricing_data,
    set_custom_pricing_field,
)


def test_missing_file_writes_defaults(tmp_path):
    record = get_default_pricing_data("default.json", tmp_path)

    assert record.provider == "default.json"
    assert record.cpu == "0.031611"
    assert record.spot_ram == "0.000892"
    assert record.internet_network_egress == "0.12"
    assert record.custom_prices_enabled == "false"

    on_disk = json.loads((tmp_path / "default.json").read_text())
    assert on_disk["CPU"] == "0.031611"
    assert on_disk["storage"] == "0.00005479452"
    # empty omitempty fields are not written
    assert "spotLabel" not in on_disk
    assert "athenaBucketName" in on_disk


def test_round_trip_is_field_for_field_equal(tmp_path):
    record = default_pricing_record()
    record.spot_label = "lifecycle"
    record.spot_label_value = "Ec2Spot"
    record.gpu_label = "gpu-type"
    record.currency_code = "EUR"
    record.discount = "30%"
    record.cluster_name = "prod"
    record.service_key_secret = "shh"

    save_pricing_data(record, "default.json", tmp_path)

    assert get_default_pricing_data("default.json", tmp_path) == record


def test_malformed_json_is_a_config_error(tmp_path):
    (tmp_path / "default.json").write_text("{not json")
    with pytest.raises(PricingConfigError):
        get_default_pricing_data("default.json", tmp_path)


def test_non_string_value_in_file_is_rejected(tmp_path):
    (tmp_path / "default.json").write_text(json.dumps({"CPU": 0.5}))
    with pytest.raises(PricingConfigError, match="CPU"):
        get_default_pricing_data("default.json", tmp_path)


def test_unknown_keys_in_file_are_ignored(tmp_path):
    (tmp_path / "default.json").write_text(json.dumps({"CPU": "1", "somethingElse": "x"}))
    assert get_default_pricing_data("default.json", tmp_path).cpu == "1"


def test_canonical_field_name_only_touches_first_letter():
    assert canonical_field_name("spotLabel") == "SpotLabel"
    assert canonical_field_name("CPU") == "CPU"
    assert canonical_field_name("") == ""


def test_every_field_has_a_setter():
    record = PricingRecord()
    for name, spec in PRICING_FIELDS.items():
        set_custom_pricing_field(record, name, f"v-{name}")
        assert getattr(record, spec.attr) == f"v-{name}"


def test_set_unknown_field():
    with pytest.raises(NoSuchFieldError, match="No such field: Bogus"):
        set_custom_pricing_field(PricingRecord(), "Bogus", "1")


def test_set_wrong_type():
    with pytest.raises(FieldTypeMismatchError):
        set_custom_pricing_field(PricingRecord(), "CPU", 1.5)


def test_patch_is_all_or_nothing():
    record = default_pricing_record()
    with pytest.raises(NoSuchFieldError) as exc:
        apply_pricing_patch(record, {"CPU": "9", "nope": "1"})

    assert exc.value.field == "Nope"
    assert record.cpu == "0.031611"


def test_patch_lowercase_names():
    record = apply_pricing_patch(default_pricing_record(), {"spotLabel": "lifecycle", "clusterName": "prod"})
    assert record.spot_label == "lifecycle"
    assert record.cluster_name == "prod"


def test_read_only_field_is_refused(monkeypatch):
    monkeypatch.setitem(PRICING_FIELDS, "Provider", PRICING_FIELDS["Provider"]._replace(settable=False))
    with pytest.raises(FieldNotSettableError, match="Cannot set Provider"):
        set_custom_pricing_field(PricingRecord(), "Provider", "x")


def test_field_table_matches_record():
    assert {spec.attr for spec in PRICING_FIELDS.values()} == {f.name for f in fields(PricingRecord)}


def test_save_leaves_no_temp_files(tmp_path):
    save_pricing_data(default_pricing_record(), "default.json", tmp_path)
    save_pricing_data(PricingRecord(cpu="2"), "default.json", tmp_path)
    assert [p.name for p in tmp_path.iterdir()] == ["default.json"]
    assert get_default_pricing_data("default.json", tmp_path).cpu == "2"


def test_readers_never_see_a_partial_file(tmp_path):
    save_pricing_data(default_pricing_record(), "default.json", tmp_path)
    stop = threading.Event()
    errors = []

    def reader():
        while not stop.is_set():
            try:
                get_default_pricing_data("default.json", tmp_path)
            except PricingConfigError as e:
                errors.append(e)
                return

    def writer():
        for n in range(200):
            save_pricing_data(PricingRecord(cpu=str(n), description="x" * 4096), "default.json", tmp_path)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer()
    stop.set()
    for t in readers:
        t.join()

    assert not errors
