"""
Tests for equiprent configuration.
"""

import logging

import pytest

from equiprent.config import (
    AttachmentConfig,
    EquipRentConfig,
    configure_logging,
    get_config,
    reset_config,
    set_config,
)


@pytest.fixture(autouse=True)
def clean_global_config():
    reset_config()
    yield
    reset_config()


class TestEquipRentConfig:

    def test_testing_preset_is_in_memory(self):
        config = EquipRentConfig.for_testing()
        assert config.storage_mode == "inmemory"
        assert config.attachments.object_store_mode == "inmemory"
        assert config.attachments.orphan_grace_period_minutes == 0

    def test_development_preset_uses_sqlite(self):
        config = EquipRentConfig.for_development("var")
        assert config.db_url == "sqlite:///var/equiprent.db"
        assert config.attachments.storage_path == "var/objects"

    def test_default_db_url_for_sqlalchemy_mode(self):
        config = EquipRentConfig(storage_mode="sqlalchemy", data_dir="d")
        assert config.db_url == "sqlite:///d/equiprent.db"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("EQUIPRENT_STORAGE_MODE", "sqlalchemy")
        monkeypatch.setenv("EQUIPRENT_DATABASE_URL", "postgresql://db/equiprent")
        monkeypatch.setenv("EQUIPRENT_OBJECT_STORE_MODE", "filesystem")
        monkeypatch.setenv("EQUIPRENT_PUBLIC_BASE_URL", "https://files.test")
        monkeypatch.setenv("EQUIPRENT_LOG_SQL", "TRUE")

        config = EquipRentConfig.from_env()

        assert config.storage_mode == "sqlalchemy"
        assert config.db_url == "postgresql://db/equiprent"
        assert config.attachments.object_store_mode == "filesystem"
        assert config.attachments.public_base_url == "https://files.test"
        assert config.attachments.storage_path == "data/objects"
        assert config.log_sql is True

    def test_dict_round_trip(self):
        config = EquipRentConfig.for_production("postgresql://db/x", "/srv/objects", "https://files.test")
        assert EquipRentConfig.from_dict(config.to_dict()) == config

    def test_attachment_config_from_partial_dict(self):
        config = AttachmentConfig.from_dict({"object_store_mode": "filesystem"})
        assert config.storage_path == "./data/objects"
        assert config.orphan_grace_period_minutes == 10


class TestGlobalConfig:

    def test_get_initializes_from_env(self, monkeypatch):
        monkeypatch.setenv("EQUIPRENT_LOG_LEVEL", "DEBUG")
        assert get_config().log_level == "DEBUG"
        assert get_config() is get_config()

    def test_set_overrides(self):
        config = EquipRentConfig.for_testing()
        set_config(config)
        assert get_config() is config


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        root = logging.getLogger()
        engine = logging.getLogger("sqlalchemy.engine")
        levels = (root.level, engine.level)
        yield
        root.setLevel(levels[0])
        engine.setLevel(levels[1])

    def test_levels_applied(self):
        configure_logging(EquipRentConfig(log_level="warning", log_sql=True))
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(EquipRentConfig(log_level="chatty"))
        assert logging.getLogger().level == logging.INFO
