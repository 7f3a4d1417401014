"""Tests for client.py: AgentClient SDK with resilience."""

import json
from unittest.mock import patch

import httpx
import pytest

from ghostguard.client import AgentClient
from ghostguard.licensing.keygen import LicenseAssertion, sign_assertion

SECRET = "agent-shared-secret"


def _client(handler, **kwargs) -> AgentClient:
    return AgentClient(
        license_key="GG-T1",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _signed(secret: str = SECRET) -> dict:
    assertion = LicenseAssertion.issue("GG-T1", "ACTIVE", None)
    return {"success": True, "valid": True, **sign_assertion(assertion, secret)}


class TestInit:
    def test_defaults(self):
        client = AgentClient()
        assert client.server_url == "http://localhost:3000"
        assert client.license_key is None
        assert client.max_retries == 3
        client.close()

    def test_strips_trailing_slash(self):
        client = AgentClient(server_url="http://backend:3000/", license_key="GG-T1")
        assert client.server_url == "http://backend:3000"
        client.close()


class TestVerify:
    def test_valid_with_signature_check(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_signed())

        client = _client(handler, license_secret=SECRET)
        result = client.verify(hwid="machine-a")
        assert result.valid is True
        assert result.assertion.license_key == "GG-T1"
        assert seen["body"] == {"license_key": "GG-T1", "hwid": "machine-a"}
        assert client.check_assertion(result.payload, result.signature)

    def test_bad_signature(self):
        client = _client(lambda r: httpx.Response(200, json=_signed("other-secret")), license_secret=SECRET)
        result = client.verify()
        assert result.valid is False
        assert result.reason == "BAD_SIGNATURE"

    def test_without_secret_signature_not_checked(self):
        client = _client(lambda r: httpx.Response(200, json=_signed("other-secret")))
        assert client.verify().valid is True

    def test_rejection_reason(self):
        body = {"success": True, "valid": False, "reason": "HWID_MISMATCH"}
        client = _client(lambda r: httpx.Response(200, json=body))
        result = client.verify(hwid="machine-b")
        assert result.valid is False
        assert result.reason == "HWID_MISMATCH"

    def test_error_body(self):
        body = {"success": False, "error": "MISSING_KEY"}
        client = _client(lambda r: httpx.Response(400, json=body))
        assert client.verify().reason == "MISSING_KEY"


class TestAgentCalls:
    def test_heartbeat(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        client = _client(handler)
        assert client.heartbeat(players=[{"id": 1}], version="3.1.0", uptime=12) is True
        assert seen["path"] == "/api/server/heartbeat"
        assert seen["body"]["players"] == [{"id": 1}]

    def test_poll_actions(self):
        body = {"success": True, "actions": [
            {"id": "ACT-1", "type": "kick", "payload": {"player": 7}, "created_at": "2026-01-01T00:00:00+00:00"},
        ]}
        client = _client(lambda r: httpx.Response(200, json=body))
        actions = client.poll_actions()
        assert [(a.id, a.type, a.payload) for a in actions] == [("ACT-1", "kick", {"player": 7})]

    def test_report_ban(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "ban_id": "GG-123"})

        client = _client(handler)
        assert client.report_ban("7", reason="aimbot", identifiers=["license:abc"]) == "GG-123"
        assert seen["body"]["reason"] == "aimbot"
        assert "ban_id" not in seen["body"]

    def test_report_ban_failure(self):
        client = _client(lambda r: httpx.Response(400, json={"success": False, "error": "MISSING_FIELDS"}))
        assert client.report_ban("7") is None

    def test_check_ban(self):
        body = {"success": True, "banned": True, "ban": {"ban_id": "GG-1"}}
        client = _client(lambda r: httpx.Response(200, json=body))
        result = client.check_ban(["license:abc"])
        assert result.banned is True
        assert result.ban["ban_id"] == "GG-1"

    def test_check_ban_error(self):
        body = {"success": False, "error": "INVALID_IDENTIFIERS"}
        client = _client(lambda r: httpx.Response(400, json=body))
        result = client.check_ban("license:abc")
        assert result.success is False
        assert result.code == "INVALID_IDENTIFIERS"

    def test_get_detections(self):
        body = {"success": True, "settings": {"noclip": False}}
        client = _client(lambda r: httpx.Response(200, json=body))
        assert client.get_detections() == {"noclip": False}

    def test_send_log(self):
        client = _client(lambda r: httpx.Response(200, json={"success": True}))
        assert client.send_log("started") is True


class TestResilience:
    @patch("ghostguard.client.time.sleep")
    def test_retry_on_connect_error(self, mock_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"success": True})

        client = _client(handler)
        assert client.heartbeat() is True
        assert len(calls) == 3
        assert mock_sleep.call_count == 2

    @patch("ghostguard.client.time.sleep")
    def test_all_retries_exhausted(self, mock_sleep):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = _client(handler, max_retries=2)
        data = client._request("get", "/health")
        assert data["error"] == "CONNECTION_ERROR"
        assert "2 retries exhausted" in data["message"]

    def test_no_retry_on_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"success": False, "error": "DB_ERROR"})

        client = _client(handler)
        assert client.send_log("x") is False
        assert len(calls) == 1

    def test_non_json_body(self):
        client = _client(lambda r: httpx.Response(502, text="<html>bad gateway</html>"))
        assert client._request("get", "/health") == {"success": False, "error": "JSON_ERROR"}

    def test_non_object_body(self):
        client = _client(lambda r: httpx.Response(200, json=[1, 2]))
        assert client._request("get", "/health")["error"] == "INVALID_RESPONSE"


@pytest.mark.parametrize("payload,signature", [(None, "x"), ("{}", None)])
def test_check_assertion_incomplete(payload, signature):
    client = AgentClient(license_secret=SECRET)
    assert client.check_assertion(payload, signature) is False
    client.close()
