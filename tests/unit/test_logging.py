"""Unit tests for logging helpers and the request logging middleware."""

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from starlette.requests import Request

import utils.logging_config as logging_config
from middleware.request_logging import RequestLoggingMiddleware, generate_request_id
from shared.ip_utils import get_client_ip
from shared.logging import hash_ip


class TestRedaction:
    def _redact(self, **event):
        return logging_config.redact_sensitive_fields(None, "info", dict(event))

    def test_secret_and_token_redacted(self):
        out = self._redact(event="x", secret="s3cr3t", token="abc", turnstile_secret="s")
        assert out["secret"] == "***REDACTED***"
        assert out["token"] == "***REDACTED***"
        assert out["turnstile_secret"] == "***REDACTED***"

    def test_header_values_redacted(self):
        out = self._redact(event="x", **{"CF-Turnstile-Token": "abc"})
        assert out["CF-Turnstile-Token"] == "***REDACTED***"

    def test_diagnostics_kept(self):
        out = self._redact(
            event="turnstile_verification_failed",
            error_codes=["invalid-input-response"],
            path="/api/protected",
        )
        assert out["event"] == "turnstile_verification_failed"
        assert out["error_codes"] == ["invalid-input-response"]
        assert out["path"] == "/api/protected"


class TestHashIp:
    def test_none_passthrough(self):
        assert hash_ip(None) is None

    def test_development_keeps_ip(self, monkeypatch):
        monkeypatch.setattr(logging_config, "IS_PRODUCTION", False)
        assert hash_ip("203.0.113.1") == "203.0.113.1"

    def test_production_hashes_ip(self, monkeypatch):
        monkeypatch.setattr(logging_config, "IS_PRODUCTION", True)
        hashed = hash_ip("203.0.113.1")
        assert hashed != "203.0.113.1"
        assert len(hashed) == 16


class TestClientIp:
    def _request(self, headers, client=("192.0.2.10", 1234)):
        return Request(
            {
                "type": "http",
                "method": "GET",
                "path": "/",
                "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
                "client": client,
            }
        )

    def test_cloudflare_header_first(self):
        req = self._request({"CF-Connecting-IP": "203.0.113.5", "X-Real-IP": "10.0.0.1"})
        assert get_client_ip(req) == "203.0.113.5"

    def test_forwarded_for_first_hop(self):
        req = self._request({"X-Forwarded-For": "203.0.113.6, 10.0.0.2"})
        assert get_client_ip(req) == "203.0.113.6"

    def test_falls_back_to_peer(self):
        assert get_client_ip(self._request({})) == "192.0.2.10"

    def test_empty_when_unknown(self):
        assert get_client_ip(self._request({}, client=None)) == ""


class TestRequestLoggingMiddleware:
    def test_request_id_format(self):
        rid = generate_request_id()
        assert rid.startswith("req_")
        assert len(rid) == 16

    def test_adds_request_id_header(self):
        app = FastAPI()

        @app.get("/ping")
        async def ping():
            return {"pong": True}

        app.add_middleware(RequestLoggingMiddleware)
        with TestClient(app) as client:
            first = client.get("/ping")
            second = client.get("/ping")
        assert first.headers["X-Request-ID"].startswith("req_")
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    def test_logs_completion_with_status(self, mocker):
        log = mocker.patch("middleware.request_logging.log")
        app = FastAPI()

        @app.get("/missing-thing")
        async def missing():
            raise HTTPException(status_code=404)

        app.add_middleware(RequestLoggingMiddleware)
        with TestClient(app) as client:
            client.get("/missing-thing")
        log.warning.assert_called_once()
        _, kwargs = log.warning.call_args
        assert kwargs["status_code"] == 404
        assert kwargs["path"] == "/missing-thing"


class TestSetupLogging:
    def test_unset_values_fall_back_to_env_defaults(self, monkeypatch, mocker):
        monkeypatch.setattr(logging_config, "LOG_FORMAT", "json")
        monkeypatch.setattr(logging_config, "LOG_LEVEL", "INFO")
        structlog_cfg = mocker.patch.object(logging_config, "configure_structlog")
        stdlib_cfg = mocker.patch.object(logging_config, "configure_stdlib_logging")
        logging_config.setup_logging(None, None)
        structlog_cfg.assert_called_once_with("json")
        stdlib_cfg.assert_called_once_with("INFO")

    def test_explicit_values_win(self, monkeypatch, mocker):
        monkeypatch.setattr(logging_config, "LOG_FORMAT", "json")
        structlog_cfg = mocker.patch.object(logging_config, "configure_structlog")
        mocker.patch.object(logging_config, "configure_stdlib_logging")
        logging_config.setup_logging("WARNING", "console")
        structlog_cfg.assert_called_once_with("console")


class TestPublicSurface:
    def test_shared_logging_exports(self):
        import shared.logging

        assert set(shared.logging.__all__) == {
            "get_logger",
            "hash_ip",
            "configure_structlog",
            "setup_logging",
        }
        assert not hasattr(shared.logging, "log_with_context")
