from __future__ import annotations

import httpx
import pytest

import main
from main import _check_health, _parse_args, _resolve_settings


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "0.0.0.0", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 8080


def test_health_subcommand_still_available() -> None:
    args = _parse_args(["health", "--service-url", "http://localhost:9000"])
    assert args.command == "health"
    assert args.service_url == "http://localhost:9000"


def test_cli_flags_override_configuration(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    config_path = tmp_path / "users.yaml"
    config_path.write_text("port: 8080\nservice_name: from-file\n", encoding="utf-8")
    monkeypatch.delenv("USERS_API_PORT", raising=False)
    monkeypatch.delenv("USERS_API_SERVICE_NAME", raising=False)

    args = _parse_args(["--config", str(config_path), "--port", "9000"])
    settings = _resolve_settings(args)

    assert settings.port == 9000
    assert settings.service_name == "from-file"


def test_invalid_configuration_exits(tmp_path) -> None:
    args = _parse_args(["--config", str(tmp_path / "missing.yaml")])
    with pytest.raises(SystemExit):
        _resolve_settings(args)


def test_check_health_reports_healthy_service(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    captured = {}

    def fake_get(url, timeout):
        captured["url"] = url
        return httpx.Response(
            200,
            json={"status": "healthy", "service": "users-api"},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(main.httpx, "get", fake_get)

    assert _check_health("http://localhost:3030/", timeout=1.0) == 0
    assert captured["url"] == "http://localhost:3030/health"
    assert "users-api" in capsys.readouterr().out


def test_check_health_handles_connection_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url, timeout):
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(main.httpx, "get", fake_get)

    assert _check_health("http://localhost:3030", timeout=1.0) == 1


def test_check_health_rejects_non_object_payload(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def fake_get(url, timeout):
        return httpx.Response(200, json=["healthy"], request=httpx.Request("GET", url))

    monkeypatch.setattr(main.httpx, "get", fake_get)

    assert _check_health("http://localhost:3030", timeout=1.0) == 1
    assert "unexpected response format" in capsys.readouterr().out
