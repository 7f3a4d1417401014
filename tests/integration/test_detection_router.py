"""Integration tests for detection settings endpoints."""

DETECTION_KEYS = ["noclip", "speed", "explosions", "vehicleSpam", "blacklistedVehicle", "godmode"]


class TestDetections:
    async def test_defaults_all_enabled(self, client):
        resp = await client.get("/api/server/detections/GG-T1")
        assert resp.status_code == 200
        settings = resp.json()["settings"]
        assert settings["license_key"] == "GG-T1"
        assert all(settings[key] is True for key in DETECTION_KEYS)

    async def test_owner_update(self, client, owner):
        resp = await client.post("/api/dashboard/detections", json={
            "token": owner["token"],
            "license_key": owner["license_key"],
            "key": "blacklistedVehicle",
            "value": False,
        })
        assert resp.status_code == 200
        assert resp.json()["settings"]["blacklistedVehicle"] is False

        agent_view = (await client.get(f"/api/server/detections/{owner['license_key']}")).json()
        assert agent_view["settings"]["blacklistedVehicle"] is False
        assert agent_view["settings"]["noclip"] is True

    async def test_other_tenant_forbidden(self, client, owner):
        resp = await client.post("/api/dashboard/detections", json={
            "token": owner["token"], "license_key": "GG-OTHER", "key": "speed", "value": False,
        })
        assert resp.status_code == 403

    async def test_unknown_key(self, client, owner):
        resp = await client.post("/api/dashboard/detections", json={
            "token": owner["token"], "license_key": owner["license_key"], "key": "wallhack", "value": False,
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_DETECTION_KEY"

    async def test_bad_token(self, client):
        resp = await client.post("/api/dashboard/detections", json={
            "token": "nope", "license_key": "GG-T1", "key": "speed", "value": False,
        })
        assert resp.status_code == 401
