import pytest

from codexsun.core.config import (
    Settings,
    get_app_host,
    get_app_port,
    parse_apps,
    parse_origins,
    DEFAULT_APPS,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("APP_HOST", "APP_PORT", "LOG_LEVEL", "CORS_ORIGINS", "CODEXSUN_APPS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAccessors:
    def test_defaults(self, clean_env):
        assert get_app_host() == "127.0.0.1"
        assert get_app_port() == 3000

    def test_from_environment(self, clean_env):
        clean_env.setenv("APP_HOST", "0.0.0.0")
        clean_env.setenv("APP_PORT", "8081")
        assert get_app_host() == "0.0.0.0"
        assert get_app_port() == 8081

    def test_invalid_port(self, clean_env):
        clean_env.setenv("APP_PORT", "eighty")
        with pytest.raises(ValueError, match="APP_PORT"):
            get_app_port()

    def test_port_out_of_range(self, clean_env):
        clean_env.setenv("APP_PORT", "70000")
        with pytest.raises(ValueError, match="APP_PORT"):
            get_app_port()


class TestParsing:
    def test_wildcard_origin(self):
        assert parse_origins("*") == "*"
        assert parse_origins("") == "*"

    def test_origin_list(self):
        assert parse_origins("http://a.test, http://b.test ,") == ["http://a.test", "http://b.test"]

    def test_wildcard_wins_in_list(self):
        assert parse_origins("http://a.test,*") == "*"

    def test_apps(self):
        assert parse_apps("a.b:c, d:e") == ["a.b:c", "d:e"]

    def test_malformed_app(self):
        with pytest.raises(ValueError, match="CODEXSUN_APPS"):
            parse_apps("just_a_module")


class TestSettings:
    def test_from_env_defaults(self, clean_env):
        settings = Settings.from_env()
        assert settings.host == "127.0.0.1"
        assert settings.port == 3000
        assert settings.log_level == "INFO"
        assert settings.cors_allows_any_origin
        assert settings.apps == [DEFAULT_APPS]

    def test_from_env_overrides(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("CORS_ORIGINS", "http://localhost:4000")
        clean_env.setenv("CODEXSUN_APPS", "myapp.routes:register")
        settings = Settings.from_env()
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["http://localhost:4000"]
        assert not settings.cors_allows_any_origin
        assert settings.apps == ["myapp.routes:register"]

    @pytest.mark.parametrize("host,expected", [
        ("127.0.0.1", "http://127.0.0.1:3000"),
        ("0.0.0.0", "http://127.0.0.1:3000"),
        ("::", "http://[::1]:3000"),
        ("example.test", "http://example.test:3000"),
    ])
    def test_base_url(self, host, expected):
        assert Settings(host=host, port=3000).base_url == expected
