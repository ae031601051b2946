async def test_preview_renders_bundled_template(client, record_data):
    resp = await client.post("/preview", json=record_data)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert "مطعم النيل" in body["html"]
    assert "tel:+201012345678" in body["html"]


async def test_preview_invalid_data(client):
    resp = await client.post("/preview", json={"businessName": "مطعم النيل", "phone": "0101"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["html"] is None
    assert body["error"].startswith("phone")


async def test_clear_template_cache(client, record_data):
    from app.main import app

    await client.post("/preview", json=record_data)
    templates = app.state.preview_service._templates
    assert templates.is_cached

    resp = await client.delete("/preview/cache")

    assert resp.status_code == 204
    assert not templates.is_cached


async def test_session_flow(client, record_data):
    resp = await client.post("/sessions")
    assert resp.status_code == 201
    session_id = resp.json()["sessionId"]
    assert "createdAt" in resp.json()
    assert "session_id" not in resp.json()

    # Before the render surface is ready nothing is sent
    resp = await client.post(f"/sessions/{session_id}/data", json=record_data)
    assert resp.status_code == 200
    assert resp.json()["businessData"]["businessName"] == "مطعم النيل"
    assert resp.json()["message"] is None

    resp = await client.post(f"/sessions/{session_id}/events", json={"type": "READY"})
    assert resp.json()["type"] == "UPDATE_CONTENT"
    assert "مطعم النيل" in resp.json()["html"]

    resp = await client.delete(f"/sessions/{session_id}/preview")
    assert resp.json()["message"] == {"type": "RESET"}
    assert resp.json()["businessData"] is None


async def test_session_turn_error_keeps_state(client, record_data):
    session_id = (await client.post("/sessions")).json()["sessionId"]
    await client.post(f"/sessions/{session_id}/data", json=record_data)

    resp = await client.post(f"/sessions/{session_id}/data", json={"whatsapp": "123"})

    body = resp.json()
    assert body["error"].startswith("whatsapp")
    assert body["businessData"]["phone"] == "01012345678"


async def test_unknown_session(client):
    resp = await client.get("/sessions/does-not-exist")
    assert resp.status_code == 404


async def test_session_data_accepts_snake_case_keys(client, record_data):
    session_id = (await client.post("/sessions")).json()["sessionId"]
    await client.post(f"/sessions/{session_id}/data", json=record_data)

    resp = await client.post(f"/sessions/{session_id}/data", json={"business_name": "مطعم القاهرة"})

    body = resp.json()
    assert body["error"] is None
    assert body["businessData"]["businessName"] == "مطعم القاهرة"
