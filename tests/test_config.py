"""Tests for loading the YAML configuration file."""

import pytest
import yaml

from config import load_config
from exceptions import MalformedConfig
from normalizer import normalize
from validator import find_violation


def write_yaml(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestLoadConfig:
    def test_round_trip_into_valid_config(self, tmp_path, standard_raw):
        raw = load_config(write_yaml(tmp_path, standard_raw))
        assert raw == standard_raw
        assert find_violation(normalize(raw)) is None

    @pytest.mark.parametrize("key", ["resource_group_name", "location", "environment"])
    def test_missing_required_key(self, tmp_path, minimal_raw, key):
        del minimal_raw[key]
        with pytest.raises(MalformedConfig) as exc_info:
            load_config(write_yaml(tmp_path, minimal_raw))
        assert exc_info.value.field == key

    def test_document_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(MalformedConfig):
            load_config(str(path))

    def test_unquoted_tls_version_is_malformed(self, tmp_path, minimal_raw):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(minimal_raw) + "minimum_tls_version: 1.2\n")
        with pytest.raises(MalformedConfig):
            normalize(load_config(str(path)))

    def test_sample_config_is_valid(self):
        from pathlib import Path

        sample = Path(__file__).resolve().parent.parent / "config.yaml"
        assert find_violation(normalize(load_config(str(sample)))) is None

    def test_empty_yaml_values_are_absent(self, tmp_path, minimal_raw):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(minimal_raw) + "eventhubs:\ntags:\nschema_groups:\n")
        config = normalize(load_config(str(path)))
        assert config.eventhubs == ()
        assert config.tags == {}
        assert config.schema_groups == ()

    def test_empty_flow_mapping_is_not_an_empty_list(self, tmp_path, minimal_raw):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(minimal_raw) + "eventhubs: {}\n")
        with pytest.raises(MalformedConfig) as exc_info:
            normalize(load_config(str(path)))
        assert exc_info.value.field == "eventhubs"
