import pytest

from sftui_cache.exceptions import ConfigurationError
from sftui_cache.options import (
    DEFAULT_CACHE_DIR,
    DEFAULT_MAX_SIZE_BYTES,
    DEFAULT_TTL_MS,
    CacheOptions,
)


class TestFromEnv:
    def test_defaults_when_unset(self):
        options = CacheOptions.from_env({})

        assert options.enabled is True
        assert options.ttl_ms == DEFAULT_TTL_MS
        assert options.max_size_bytes == DEFAULT_MAX_SIZE_BYTES
        assert options.directory == DEFAULT_CACHE_DIR

    def test_values_are_read(self, tmp_path):
        options = CacheOptions.from_env(
            {
                "SFTUI_CACHE_ENABLED": "no",
                "SFTUI_CACHE_TTL_MS": "1500",
                "SFTUI_CACHE_MAX_SIZE": " 2048 ",
                "SFTUI_CACHE_DIR": str(tmp_path),
            }
        )

        assert options == CacheOptions(
            enabled=False, ttl_ms=1500, max_size_bytes=2048, directory=str(tmp_path)
        )

    def test_reads_process_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SFTUI_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("SFTUI_CACHE_TTL_MS", "0")

        options = CacheOptions.from_env()

        assert options.directory == str(tmp_path)
        assert options.expires is False

    @pytest.mark.parametrize(
        "environ",
        [
            {"SFTUI_CACHE_TTL_MS": "five minutes"},
            {"SFTUI_CACHE_MAX_SIZE": "0"},
            {"SFTUI_CACHE_ENABLED": "maybe"},
            {"SFTUI_CACHE_TTL_MS": "-1"},
        ],
    )
    def test_invalid_values_raise(self, environ):
        with pytest.raises(ConfigurationError):
            CacheOptions.from_env(environ)


class TestFromConfig:
    def test_config_file_section(self, tmp_path):
        options = CacheOptions.from_config(
            {"enabled": True, "ttl": 1000, "maxSize": 4096, "cacheDir": str(tmp_path)}
        )

        assert options.ttl_ms == 1000
        assert options.max_size_bytes == 4096
        assert options.directory == str(tmp_path)

    def test_missing_keys_use_defaults(self):
        options = CacheOptions.from_config({"enabled": False})

        assert options.enabled is False
        assert options.ttl_ms == DEFAULT_TTL_MS

    def test_invalid_section_raises(self):
        with pytest.raises(ConfigurationError):
            CacheOptions.from_config({"maxSize": -10})


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        CacheOptions(max_size_bytes=0).validate()
