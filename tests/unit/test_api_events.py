from __future__ import annotations

import pytest

from api.main import create_app
from eventlog.core.config import ServerConfig
from tests.unit._api_test_client import close_app, make_client


@pytest.mark.anyio
async def test_instant_event_is_stored_and_returned(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.post("/api/instant-events", json={"message": "Play clicked", "seq": 1})
        assert r.status_code == 201
        event = r.json()["event"]
        assert event["seq"] == 1
        assert event["message"] == "Play clicked"
        assert event["id"]
        assert event["serverTimeZone"] == test_config.server.timezone
        assert {"serverTime", "serverTimeLocal", "serverTimeMs"} <= event.keys()

        r = await ac.get("/api/instant-events")
        assert r.json()["items"] == [event]

    assert test_config.instant_file.read_text().count("\n") == 1
    await close_app(app)


@pytest.mark.anyio
async def test_instant_event_without_message_is_rejected(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.post("/api/instant-events", json={"seq": 1})
        assert r.status_code == 400
        assert r.json()["error"] == "message is required"

        r = await ac.get("/api/events")
        assert r.json()["counts"] == {"instant": 0, "batch": 0}

    await close_app(app)


@pytest.mark.anyio
async def test_invalid_json_is_rejected(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.post(
            "/api/instant-events",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid JSON payload"

    await close_app(app)


@pytest.mark.anyio
async def test_nan_and_infinity_tokens_are_invalid_json(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        cases = [
            ("/api/instant-events", b'{"message": "x", "seq": NaN}'),
            ("/api/batch-events", b'{"events": [{"message": "x", "extra": {"v": -Infinity}}]}'),
        ]
        for path, body in cases:
            r = await ac.post(path, content=body)
            assert r.status_code == 400
            assert r.json()["error"] == "Invalid JSON payload"

        r = await ac.get("/api/events")
        assert r.json()["counts"] == {"instant": 0, "batch": 0}

    await close_app(app)


@pytest.mark.anyio
async def test_oversized_body_gets_413(test_config):
    cfg = test_config.model_copy(update={"server": ServerConfig(max_body_bytes=64)})
    app = create_app(cfg)

    async with make_client(app) as ac:
        r = await ac.post("/api/batch-events", json={"events": [{"message": "x" * 200}]})
        assert r.status_code == 413

        r = await ac.get("/api/batch-events")
        assert r.json()["items"] == []

    await close_app(app)


@pytest.mark.anyio
async def test_batch_of_three_shares_batch_id(test_config):
    app = create_app(test_config)
    events = [{"seq": i, "message": f"Step {i}", "localTime": "2026-03-01T12:00:00.000Z"} for i in (1, 2, 3)]

    async with make_client(app) as ac:
        r = await ac.post("/api/batch-events", json={"events": events})
        assert r.status_code == 201
        body = r.json()
        assert body["stored"] == 3

        items = (await ac.get("/api/batch-events")).json()["items"]
        assert [i["seq"] for i in items] == [1, 2, 3]
        assert {i["batchId"] for i in items} == {body["batchId"]}

    await close_app(app)


@pytest.mark.anyio
async def test_empty_batch_is_rejected(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.post("/api/batch-events", json={"events": []})
        assert r.status_code == 400
        assert r.json()["error"] == "events array is empty"

    await close_app(app)


@pytest.mark.anyio
async def test_batch_with_invalid_item_cites_index(test_config):
    app = create_app(test_config)
    events = [{"seq": i + 1, "message": f"m{i}"} for i in range(5)]
    del events[3]["message"]

    async with make_client(app) as ac:
        r = await ac.post("/api/batch-events", json={"events": events})
        assert r.status_code == 400
        assert r.json()["index"] == 3
        assert "events[3]" in r.json()["error"]

        r = await ac.get("/api/events")
        assert r.json()["batch"] == []

    assert test_config.batch_file.read_text() == ""
    await close_app(app)


@pytest.mark.anyio
async def test_delete_truncates_both_channels(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        await ac.post("/api/instant-events", json={"message": "Play clicked"})
        await ac.post("/api/batch-events", json={"events": [{"message": "Play clicked"}]})

        r = await ac.delete("/api/events")
        assert r.status_code == 200
        assert r.json() == {"ok": True}

        data = (await ac.get("/api/events")).json()
        assert data["instant"] == []
        assert data["batch"] == []
        assert data["counts"] == {"instant": 0, "batch": 0}
        assert data["updatedAt"].endswith("Z")

    assert test_config.instant_file.stat().st_size == 0
    assert test_config.batch_file.stat().st_size == 0
    await close_app(app)


@pytest.mark.anyio
async def test_write_failure_returns_500_and_keeps_index(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.post("/api/instant-events", json={"message": "first"})
        assert r.status_code == 201

        path = test_config.instant_file
        path.unlink()
        path.mkdir()

        r = await ac.post("/api/instant-events", json={"message": "second"})
        assert r.status_code == 500

        items = (await ac.get("/api/instant-events")).json()["items"]
        assert [i["message"] for i in items] == ["first"]

    await close_app(app)


@pytest.mark.anyio
async def test_unsupported_method_gets_405_with_allow(test_config):
    app = create_app(test_config)

    async with make_client(app) as ac:
        r = await ac.put("/api/events", json={})
        assert r.status_code == 405
        assert r.headers["allow"] == "GET, POST, DELETE"

        r = await ac.post("/api/nowhere", json={})
        assert r.status_code == 405
        assert r.headers["allow"] == "GET, POST, DELETE"

        r = await ac.get("/api/nowhere")
        assert r.status_code == 404

    await close_app(app)


@pytest.mark.anyio
async def test_existing_logs_are_loaded_on_startup(test_config):
    data_dir = test_config.data_dir
    data_dir.mkdir(parents=True)
    test_config.instant_file.write_text('{"seq":1,"message":"a"}\n{"seq":2,"mes')
    test_config.batch_file.write_text("")

    app = create_app(test_config)
    async with make_client(app) as ac:
        r = await ac.get("/api/events")
        assert r.json()["instant"] == [{"seq": 1, "message": "a"}]

    await close_app(app)
