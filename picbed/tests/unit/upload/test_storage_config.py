"""
Storage Config Validation / Catalog Unit Tests
"""

import pytest

from picbed.features.upload.catalogs import (
    MSG_EMPTY_CONFIG,
    MSG_INCOMPLETE_CONFIG,
    MSG_INVALID_TYPE,
    MSG_VALID_CONFIG,
    get_required_fields,
    validate_storage_config,
)
from picbed.features.upload.file_manager import FileManager
from picbed.features.upload.schemas import NameRule, StorageType

COMPLETE_CONFIGS = {
    "s3": {"region": "us-east-1", "bucket": "b", "access_key": "k", "secret_key": "s"},
    "oss": {"endpoint": "oss-cn-beijing.aliyuncs.com", "bucket": "b", "access_key": "k", "secret_key": "s"},
    "cos": {"region": "ap-guangzhou", "bucket": "b-125", "secret_id": "i", "secret_key": "s"},
    "telegram": {"bot_token": "1:abc", "chat_id": "-100"},
}


class TestValidateStorageConfig:
    @pytest.mark.parametrize("storage_type", list(COMPLETE_CONFIGS))
    def test_complete_config_is_valid(self, storage_type):
        result = validate_storage_config(storage_type, COMPLETE_CONFIGS[storage_type])

        assert result.is_valid is True
        assert result.message == MSG_VALID_CONFIG

    @pytest.mark.parametrize("config", [None, {}])
    def test_empty_config_is_valid(self, config):
        result = validate_storage_config("s3", config)

        assert result.is_valid is True
        assert result.message == MSG_EMPTY_CONFIG

    def test_only_optional_fields_counts_as_empty(self):
        result = validate_storage_config("telegram", {"proxy_url": "tg.example.com", "bot_token": "  "})

        assert result.is_valid is True
        assert result.message == MSG_EMPTY_CONFIG

    def test_partial_config_is_invalid(self):
        result = validate_storage_config("cos", {"region": "ap-guangzhou", "bucket": "b"})

        assert result.is_valid is False
        assert result.message == MSG_INCOMPLETE_CONFIG

    def test_whitespace_counts_as_missing(self):
        config = dict(COMPLETE_CONFIGS["oss"], secret_key="   ")

        assert validate_storage_config("oss", config).is_valid is False

    @pytest.mark.parametrize("config", [None, {}, COMPLETE_CONFIGS["s3"]])
    def test_unknown_type_always_invalid(self, config):
        result = validate_storage_config("ftp", config)

        assert result.is_valid is False
        assert result.message == MSG_INVALID_TYPE

    def test_enum_and_string_types_agree(self):
        assert validate_storage_config(StorageType.S3, COMPLETE_CONFIGS["s3"]) == validate_storage_config(
            "s3", COMPLETE_CONFIGS["s3"]
        )

    def test_required_fields(self):
        assert get_required_fields("s3") == ("region", "bucket", "access_key", "secret_key")
        assert get_required_fields("telegram") == ("bot_token", "chat_id")
        assert get_required_fields("ftp") == ()


class TestIsStorageConfigured:
    def test_configured(self):
        assert FileManager.is_storage_configured("telegram", {"telegram": COMPLETE_CONFIGS["telegram"]}) is True

    @pytest.mark.parametrize(
        "storage_type, config",
        [
            ("telegram", None),
            ("", {"telegram": COMPLETE_CONFIGS["telegram"]}),
            ("telegram", {"telegram": {}}),
            ("telegram", {"telegram": {"bot_token": "1:abc"}}),
            ("ftp", {"ftp": {"host": "x"}}),
        ],
    )
    def test_not_configured(self, storage_type, config):
        assert FileManager.is_storage_configured(storage_type, config) is False


class TestCatalogs:
    def test_supported_storages(self):
        storages = FileManager.get_supported_storages()

        assert set(storages) == set(StorageType)
        assert [f.key for f in storages[StorageType.TELEGRAM].fields] == [
            "bot_token",
            "chat_id",
            "proxy_url",
            "custom_domain",
        ]

    def test_name_rules_and_formats(self):
        assert set(FileManager.get_name_rules()) == set(NameRule)
        assert set(FileManager.get_output_formats()) == {"original", "jpeg", "png", "webp"}

    @pytest.mark.parametrize(
        "catalog",
        [
            FileManager.get_supported_storages,
            FileManager.get_name_rules,
            FileManager.get_output_formats,
            FileManager.get_default_settings,
        ],
    )
    def test_catalogs_are_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog()["injected"] = "value"

    def test_default_image_settings_are_read_only(self):
        with pytest.raises(TypeError):
            FileManager.get_default_settings()["image"]["quality"] = 0.1

    def test_validate_config_delegates(self):
        assert FileManager.validate_config("s3", {"bucket": "b"}).message == MSG_INCOMPLETE_CONFIG
