"""
Tests for connection configuration loading and resolution.
"""

import pytest

from connectors import (ConfigurationException, ConnectionConfig,
                        load_connection_config, load_env_file,
                        normalize_base_url, resolve_connection_config)


class TestNormalizeBaseUrl:
    """Tests for base URL validation."""

    def test_public_api_url(self):
        assert normalize_base_url("https://api.github.com") == "https://api.github.com/"
        assert normalize_base_url("https://api.github.com/") == "https://api.github.com/"

    def test_enterprise_url_gets_api_path(self):
        assert normalize_base_url("https://ghe.example.com") == "https://ghe.example.com/api/v3/"

    def test_enterprise_url_with_api_path(self):
        """Test an API path already present is not appended twice."""
        assert normalize_base_url("https://ghe.example.com/api/v3") == "https://ghe.example.com/api/v3/"

    @pytest.mark.parametrize("url", ["not a url", "ftp://ghe.example.com", "https://", ""])
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigurationException):
            normalize_base_url(url)


class TestResolveConnectionConfig:
    """Tests for precedence between explicit config and environment."""

    def test_explicit_overrides_environment(self):
        config = ConnectionConfig(token="explicit", base_url="https://ghe.example.com")
        environ = {"GITHUB_TOKEN": "env", "GITHUB_BASE_URL": "https://other.example.com"}

        resolved = resolve_connection_config(config, environ)

        assert resolved.token == "explicit"
        assert resolved.base_url == "https://ghe.example.com/api/v3/"

    def test_environment_fallback(self):
        resolved = resolve_connection_config(ConnectionConfig(), {"GITHUB_TOKEN": "env"})

        assert resolved.token == "env"
        assert resolved.base_url is None

    def test_missing_token(self):
        with pytest.raises(ConfigurationException, match="token"):
            resolve_connection_config(ConnectionConfig(), {})

    def test_empty_token_is_missing(self):
        with pytest.raises(ConfigurationException):
            resolve_connection_config(ConnectionConfig(token=""), {"GITHUB_TOKEN": ""})

    def test_uses_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        monkeypatch.delenv("GITHUB_BASE_URL", raising=False)

        assert resolve_connection_config().token == "from-env"


class TestLoadConnectionConfig:
    """Tests for YAML connection files."""

    def test_top_level_keys(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("token: abc\nbase_url: https://ghe.example.com\n")

        config = load_connection_config(path)

        assert config == ConnectionConfig(token="abc", base_url="https://ghe.example.com")

    def test_named_connection(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text(
            "connections:\n"
            "  public:\n"
            "    token: pub\n"
            "  enterprise:\n"
            "    token: ent\n"
            "    base_url: https://ghe.example.com\n"
        )

        assert load_connection_config(path, connection="enterprise").token == "ent"
        assert load_connection_config(path, connection="public").token == "pub"

    def test_single_connection_is_default(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("connections:\n  only:\n    token: one\n")

        assert load_connection_config(path).token == "one"

    def test_ambiguous_connection(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("connections:\n  a:\n    token: 1\n  b:\n    token: 2\n")

        with pytest.raises(ConfigurationException, match="Multiple connections"):
            load_connection_config(path)

    def test_unknown_connection(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("connections:\n  a:\n    token: 1\n")

        with pytest.raises(ConfigurationException, match="Unknown connection"):
            load_connection_config(path, connection="b")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("token: [unclosed\n")

        with pytest.raises(ConfigurationException, match="Invalid YAML"):
            load_connection_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationException):
            load_connection_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "github.yaml"
        path.write_text("")

        assert load_connection_config(path) == ConnectionConfig()


class TestLoadEnvFile:
    """Tests for dotenv-style files."""

    def test_existing_variables_win(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text(
            "# comment\n"
            "\n"
            "GITHUB_TOKEN=from-file\n"
            "export GITHUB_BASE_URL='https://ghe.example.com'\n"
            "not a pair\n"
        )
        environ = {"GITHUB_TOKEN": "existing"}

        assert load_env_file(path, environ) == 1
        assert environ == {
            "GITHUB_TOKEN": "existing",
            "GITHUB_BASE_URL": "https://ghe.example.com",
        }

    def test_value_may_contain_equals(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text('GITHUB_TOKEN="a=b"\n')
        environ = {}

        load_env_file(path, environ)

        assert environ["GITHUB_TOKEN"] == "a=b"

    def test_missing_file(self, tmp_path):
        environ = {}

        assert load_env_file(tmp_path / ".env", environ) == 0
        assert environ == {}
