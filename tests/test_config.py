from __future__ import annotations

import os

import pytest

from token_broker.config import (
    DEFAULT_HOST,
    DEFAULT_TTL_SECONDS,
    load_env_file,
    load_issuer_config,
    load_server_config,
)
from token_broker.errors import ConfigError

ISSUER_ENV = {"ISSUER": "i", "SERCRET_KEY": "s", "DOMAIN": "d", "ADMIN_USER_ID": "a"}


def test_server_config_parses_port_and_defaults_host():
    cfg = load_server_config({"SERVER_URL": "http://localhost:8000/"})
    assert cfg.port == 8000
    assert cfg.host == DEFAULT_HOST
    assert cfg.url == "http://localhost:8000"
    assert not cfg.url_is_secure
    assert cfg.key_path is None and cfg.cert_path is None


def test_server_config_keeps_tls_paths_and_host():
    cfg = load_server_config(
        {"SERVER_URL": "https://example.com:8443", "HOST": "127.0.0.1"},
        key_path="key.pem",
        cert_path="cert.pem",
    )
    assert cfg.url_is_secure
    assert (cfg.host, cfg.key_path, cfg.cert_path) == ("127.0.0.1", "key.pem", "cert.pem")


def test_server_config_is_immutable():
    cfg = load_server_config({"SERVER_URL": "http://localhost:8000"})
    with pytest.raises(ValueError):
        cfg.port = 1


@pytest.mark.parametrize(
    "env",
    [
        {},
        {"SERVER_URL": ""},
        {"SERVER_URL": "localhost:8000"},
        {"SERVER_URL": "ftp://localhost:21"},
        {"SERVER_URL": "http://localhost"},
        {"SERVER_URL": "http://localhost:notaport"},
        {"SERVER_URL": "http://localhost:70000"},
        {"SERVER_URL": "http://localhost:0"},
    ],
)
def test_server_config_rejects_bad_urls(env):
    with pytest.raises(ConfigError):
        load_server_config(env)


def test_server_config_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SERVER_URL", "http://0.0.0.0:9100")
    assert load_server_config().port == 9100


def test_issuer_config_from_env():
    cfg = load_issuer_config(ISSUER_ENV)
    assert (cfg.issuer, cfg.secret_key, cfg.domain, cfg.admin_user_id) == ("i", "s", "d", "a")
    assert cfg.ttl_seconds == DEFAULT_TTL_SECONDS
    assert "secret_key" not in repr(cfg)


def test_issuer_config_names_every_missing_variable():
    with pytest.raises(ConfigError) as exc:
        load_issuer_config({"ISSUER": "i", "DOMAIN": ""})
    message = str(exc.value)
    for name in ("SERCRET_KEY", "DOMAIN", "ADMIN_USER_ID"):
        assert name in message
    assert "ISSUER," not in message


def test_issuer_config_ttl_override():
    assert load_issuer_config({**ISSUER_ENV, "TOKEN_TTL_SECONDS": "300"}).ttl_seconds == 300


@pytest.mark.parametrize("ttl", ["abc", "0", "-5"])
def test_issuer_config_rejects_bad_ttl(ttl):
    with pytest.raises(ConfigError):
        load_issuer_config({**ISSUER_ENV, "TOKEN_TTL_SECONDS": ttl})


def test_env_file_does_not_override_existing_variables(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("SERVER_URL=http://from-file:1\nISSUER=file-issuer\n")
    monkeypatch.setenv("SERVER_URL", "http://from-env:2")
    monkeypatch.setenv("ISSUER", "placeholder")
    monkeypatch.delenv("ISSUER")

    assert load_env_file(env_file) is True
    assert os.environ["SERVER_URL"] == "http://from-env:2"
    assert os.environ["ISSUER"] == "file-issuer"


def test_missing_env_file_is_skipped(tmp_path):
    assert load_env_file(tmp_path / "absent.env") is False
