"""配置加载测试。"""

from __future__ import annotations

from pathlib import Path

import pytest

from instaresolve.config import DEFAULT_CACHE_TTL, DEFAULT_GRAPHQL_DOC_ID, AppConfig, ConfigError, load_config


class TestLoadConfig:
    """测试 YAML 配置加载。"""

    def test_load_full(self, sample_config_path: Path) -> None:
        config = load_config(sample_config_path, environ={})

        assert config.http.timeout == 10
        assert config.http.verify_ssl is False
        assert config.relay.username == "brd-customer-hl_1-zone-resi"
        assert config.relay.password == "token-xyz"
        assert config.relay.enabled is True
        assert config.instagram.cookie == "999:abc:1:def"
        assert config.instagram.graphql_doc_id == "123456"
        assert config.cache.ttl_seconds == 600
        assert config.resolver.max_resolve_seconds == 20

    def test_env_overrides_secrets(self, sample_config_path: Path) -> None:
        environ = {
            "PROXY_USERNAME": "brd-customer-env-zone-env",
            "PROXY_PASSWORD": "env-token",
            "IG_COOKIE": "sessionid=env",
            "GRAPHQL_DOC_ID": "777",
        }

        config = load_config(sample_config_path, environ=environ)

        assert config.relay.username == "brd-customer-env-zone-env"
        assert config.relay.password == "env-token"
        assert config.instagram.cookie == "sessionid=env"
        assert config.instagram.graphql_doc_id == "777"

    def test_blank_env_is_ignored(self, sample_config_path: Path) -> None:
        config = load_config(sample_config_path, environ={"IG_COOKIE": "  "})

        assert config.instagram.cookie == "999:abc:1:def"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = load_config(path, environ={})

        assert config.http.timeout == 15
        assert config.relay.enabled is False
        assert config.instagram.graphql_doc_id == DEFAULT_GRAPHQL_DOC_ID
        assert config.cache.ttl_seconds == DEFAULT_CACHE_TTL
        assert config.resolver.max_resolve_seconds == 45

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml", environ={})

    @pytest.mark.parametrize(
        "content",
        [
            "- a\n- b\n",
            "http: 3\n",
            "http:\n  timeout: 0\n",
            "cache:\n  ttl_seconds: -1\n",
            "cache:\n  ttl_seconds: 0.5\n",
            "resolver:\n  max_resolve_seconds: -5\n",
            "resolver:\n  max_resolve_seconds: soon\n",
        ],
    )
    def test_invalid_content(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path, environ={})


class TestFromEnv:
    """测试仅从环境变量构建配置。"""

    def test_from_env(self) -> None:
        config = AppConfig.from_env({"PROXY_USERNAME": "u", "PROXY_PASSWORD": "p", "IG_COOKIE": "c"})

        assert config.relay.enabled is True
        assert config.instagram.cookie == "c"
        assert config.instagram.graphql_doc_id == DEFAULT_GRAPHQL_DOC_ID

    def test_from_empty_env(self) -> None:
        config = AppConfig.from_env({})

        assert config.relay.enabled is False
        assert config.instagram.cookie == ""
