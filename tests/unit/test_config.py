"""Unit tests for tag merge config."""

from pathlib import Path

import pytest

from archive_tag_merge.config import PLUGIN_INFO, MergeConfig, load_config_file
from archive_tag_merge.core.exceptions import InvalidParameterError


class TestMergeConfigFromParams:
    """MergeConfig.from_paramsのテスト."""

    def test_defaults(self) -> None:
        config = MergeConfig.from_params({})

        assert config == MergeConfig()
        assert config.lang == "zh"
        assert config.page_size == 1000
        assert config.dry_run is True
        assert config.delete_source is True
        assert config.max_merges == 0
        assert config.report_dir is None

    def test_none_params(self) -> None:
        assert MergeConfig.from_params(None) == MergeConfig()

    def test_non_mapping_params_raise(self) -> None:
        with pytest.raises(InvalidParameterError, match="expected an object"):
            MergeConfig.from_params(["x"])

    def test_string_values(self) -> None:
        config = MergeConfig.from_params(
            {"lang": " ja ", "page_size": "500", "dry_run": "false", "delete_source": "0", "max_merges": "3"}
        )

        assert config.lang == "ja"
        assert config.page_size == 500
        assert config.dry_run is False
        assert config.delete_source is False
        assert config.max_merges == 3

    def test_blank_lang_falls_back(self) -> None:
        assert MergeConfig.from_params({"lang": "   "}).lang == "zh"

    def test_page_size_is_clamped(self) -> None:
        assert MergeConfig.from_params({"page_size": 5000}).page_size == 2000
        assert MergeConfig.from_params({"page_size": 0}).page_size == 1
        assert MergeConfig.from_params({"page_size": -10}).page_size == 1

    def test_negative_max_merges_means_unlimited(self) -> None:
        assert MergeConfig.from_params({"max_merges": -1}).max_merges == 0

    def test_invalid_bool_raises(self) -> None:
        """dry_run の誤入力で書き込みモードにならないこと."""
        with pytest.raises(InvalidParameterError, match="dry_run"):
            MergeConfig.from_params({"dry_run": "nope"})

    def test_invalid_int_raises(self) -> None:
        with pytest.raises(InvalidParameterError, match="page_size"):
            MergeConfig.from_params({"page_size": "lots"})
        with pytest.raises(InvalidParameterError, match="max_merges"):
            MergeConfig.from_params({"max_merges": True})

    def test_report_dir(self, tmp_path: Path) -> None:
        config = MergeConfig.from_params({"report_dir": str(tmp_path)})

        assert config.report_dir == tmp_path


class TestWithOverrides:
    """MergeConfig.with_overridesのテスト."""

    def test_none_values_ignored(self) -> None:
        config = MergeConfig(lang="ja")

        assert config.with_overrides(lang=None, page_size=None) == config

    def test_values_are_normalized(self) -> None:
        config = MergeConfig().with_overrides(page_size=99999, dry_run=False)

        assert config.page_size == 2000
        assert config.dry_run is False
        assert config.delete_source is True


class TestLoadConfigFile:
    """load_config_file関数のテスト."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "tag_merge.yml"
        config_file.write_text("lang: ja\npage_size: 200\ndry_run: false\nmax_merges: 10\n", encoding="utf-8")

        config = load_config_file(config_file)

        assert config == MergeConfig(lang="ja", page_size=200, dry_run=False, max_merges=10)

    def test_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yml"
        config_file.write_text("", encoding="utf-8")

        assert load_config_file(config_file) == MergeConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config_file(tmp_path / "missing.yml")

    def test_non_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config_file(config_file)

    def test_broken_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.yml"
        config_file.write_text("lang: [ja\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to parse config file"):
            load_config_file(config_file)


class TestPluginInfo:
    """PLUGIN_INFOのテスト."""

    def test_parameters(self) -> None:
        names = [p["name"] for p in PLUGIN_INFO["parameters"]]

        assert PLUGIN_INFO["type"] == "script"
        assert names == ["lang", "page_size", "dry_run", "delete_source", "max_merges"]

    def test_defaults_round_trip_through_from_params(self) -> None:
        defaults = {p["name"]: p["default_value"] for p in PLUGIN_INFO["parameters"]}

        assert MergeConfig.from_params(defaults) == MergeConfig()
