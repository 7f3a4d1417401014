"""
AgentClient SDK, a sync client for the GhostGuard backend.

Used by game-server agents (and tooling that impersonates one) to verify a
license, heartbeat, poll dashboard commands, ship logs, and report bans.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ghostguard.licensing.keygen import LicenseAssertion, decode_assertion, verify_assertion


@dataclass
class VerifyResult:
    """Result of verify() call."""

    valid: bool
    reason: str = ""
    payload: Optional[str] = None
    signature: Optional[str] = None
    assertion: Optional[LicenseAssertion] = None


@dataclass
class BanCheckResult:
    """Result of check_ban() call."""

    success: bool
    banned: bool = False
    ban: Optional[dict[str, Any]] = None
    code: str = ""


@dataclass
class AgentCommand:
    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""


class AgentClient:
    """
    Synchronous HTTP client for one tenant's agent.

    Only connection failures and timeouts are retried; every request that
    reached the server is taken as final, since the backend never deduplicates.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:3000",
        license_key: Optional[str] = None,
        license_secret: Optional[str] = None,
        timeout: int = 10,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.license_key = license_key
        self.license_secret = license_secret
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
            transport=transport,
        )

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Central HTTP method with retry and structured error handling.

        Returns the parsed JSON body (error bodies included), or a
        ``{"success": False, "error": ...}`` dict when no response arrived.
        """
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(path, **kwargs)
                data = resp.json()
                if not isinstance(data, dict):
                    return {"success": False, "error": "INVALID_RESPONSE"}
                return data
            except (httpx.TimeoutException, httpx.TransportError) as e:
                last_error = str(e) or type(e).__name__
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except json.JSONDecodeError:
                return {"success": False, "error": "JSON_ERROR"}

        return {
            "success": False,
            "error": "CONNECTION_ERROR",
            "message": f"All {self.max_retries} retries exhausted: {last_error}",
        }

    # ── License ──

    def verify(self, hwid: str = "") -> VerifyResult:
        """Verify the configured license key, binding ``hwid`` on first use.

        When a license secret is configured the returned signature is checked
        locally and a bad signature is reported as ``BAD_SIGNATURE``.
        """
        body: dict[str, Any] = {"license_key": self.license_key or ""}
        if hwid:
            body["hwid"] = hwid
        data = self._request("post", "/api/license/verify", json=body)

        if not data.get("valid"):
            return VerifyResult(valid=False, reason=data.get("reason") or data.get("error", ""))

        payload = data.get("payload")
        signature = data.get("signature")
        if self.license_secret and not self.check_assertion(payload, signature):
            return VerifyResult(valid=False, reason="BAD_SIGNATURE")

        return VerifyResult(
            valid=True,
            payload=payload,
            signature=signature,
            assertion=decode_assertion(payload) if payload else None,
        )

    def check_assertion(self, payload: Optional[str], signature: Optional[str]) -> bool:
        """Offline check of a previously received assertion."""
        if not self.license_secret or not payload or not signature:
            return False
        return verify_assertion(payload, signature, self.license_secret)

    # ── Liveness ──

    def heartbeat(
        self,
        players: Optional[list[dict[str, Any]]] = None,
        version: str = "",
        uptime: float = 0,
    ) -> bool:
        body = {
            "license_key": self.license_key or "",
            "players": players or [],
            "version": version or None,
            "uptime": uptime,
        }
        data = self._request("post", "/api/server/heartbeat", json=body)
        return bool(data.get("success", False))

    def poll_actions(self) -> list[AgentCommand]:
        """Fetch and clear queued dashboard commands. Lost if not handled."""
        data = self._request("get", f"/api/server/actions/{self.license_key}")
        return [
            AgentCommand(
                id=a.get("id", ""),
                type=a.get("type", ""),
                payload={} if a.get("payload") is None else a["payload"],
                created_at=a.get("created_at", ""),
            )
            for a in data.get("actions", [])
        ]

    # ── Logs ──

    def send_log(
        self,
        message: str,
        level: str = "info",
        type: str = "log",
        title: str = "Server",
        meta: Any = None,
    ) -> bool:
        body = {
            "license_key": self.license_key or "",
            "message": message,
            "level": level,
            "type": type,
            "title": title,
            "meta": meta,
        }
        data = self._request("post", "/api/server/log", json=body)
        return bool(data.get("success", False))

    # ── Bans ──

    def report_ban(
        self,
        player: str,
        reason: str = "",
        duration: str = "P",
        identifiers: Optional[list[str]] = None,
        banned_by: str = "",
        ban_id: str = "",
    ) -> Optional[str]:
        """Record a ban. Returns the ban id, or None on failure."""
        body: dict[str, Any] = {
            "license_key": self.license_key or "",
            "player": player,
            "duration": duration,
            "identifiers": identifiers or [],
        }
        if reason:
            body["reason"] = reason
        if banned_by:
            body["banned_by"] = banned_by
        if ban_id:
            body["ban_id"] = ban_id
        data = self._request("post", "/api/server/ban", json=body)
        if not data.get("success"):
            return None
        return data.get("ban_id")

    def check_ban(self, identifiers: list[str]) -> BanCheckResult:
        body = {"license_key": self.license_key or "", "identifiers": identifiers}
        data = self._request("post", "/api/server/ban/check", json=body)
        if not data.get("success"):
            return BanCheckResult(success=False, code=data.get("error", ""))
        return BanCheckResult(
            success=True,
            banned=bool(data.get("banned")),
            ban=data.get("ban"),
        )

    def get_detections(self) -> dict[str, Any]:
        data = self._request("get", f"/api/server/detections/{self.license_key}")
        return data.get("settings") or {}

    # ── Lifecycle ──

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()
