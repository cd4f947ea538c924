import asyncio
from dataclasses import replace

from fastapi.testclient import TestClient

from session_segments.application.factories import TOKEN_SEGMENT
from session_segments.config import settings
from session_segments.infrastructure.adapters.session.memory_store import InMemorySessionStore
from session_segments.infrastructure.metrics import registry
from session_segments.presentation.api.main import create_app

COOKIE = "TESTSESS"


def make_client() -> tuple[TestClient, dict[str, str]]:
    backend: dict[str, str] = {}
    cfg = replace(settings, session_name=COOKIE, session_backend="memory", cookie_domain="")
    app = create_app(cfg, store_factory=lambda: InMemorySessionStore(backend, name=COOKIE))
    return TestClient(app), backend


def test_health():
    client, _ = make_client()
    assert client.get("/health").json() == {"status": "ok", "backend": "memory", "session_name": COOKIE}


def test_read_without_session_sets_no_cookie():
    client, backend = make_client()
    res = client.get("/v1/segments/cart/values/qty")
    assert res.json()["value"] is None
    assert res.json()["exists"] is False
    assert COOKIE not in res.cookies
    assert backend == {}


def test_values_persist_between_requests():
    client, backend = make_client()
    res = client.put("/v1/segments/cart/values/qty", json={"value": 3})
    assert res.status_code == 200
    assert COOKIE in res.cookies
    assert len(backend) == 1

    res = client.get("/v1/segments/cart/values/qty")
    assert res.json() == {"segment": "cart", "key": "qty", "value": 3, "exists": True}

    client.delete("/v1/segments/cart/values/qty")
    assert client.get("/v1/segments/cart/values/qty").json()["exists"] is False


def test_clear_segment():
    client, _ = make_client()
    client.put("/v1/segments/cart/values/qty", json={"value": 3})
    client.put("/v1/segments/user/values/id", json={"value": 7})
    client.delete("/v1/segments/cart")
    assert client.get("/v1/segments/cart/values/qty").json()["value"] is None
    assert client.get("/v1/segments/user/values/id").json()["value"] == 7


def test_flash_rotates_per_request():
    client, _ = make_client()
    client.post("/v1/segments/cart/flash/msg", json={"value": "saved"})

    second = client.get("/v1/segments/cart/flash/msg").json()
    assert second["current"] == "saved"
    assert second["next"] is None

    third = client.get("/v1/segments/cart/flash/msg").json()
    assert third["current"] is None
    assert third["previous"] == "saved"

    fourth = client.get("/v1/segments/cart/flash/msg").json()
    assert fourth["previous"] is None


def test_flash_now_is_readable_next_request_too():
    client, _ = make_client()
    client.post("/v1/segments/cart/flash/msg", params={"now": "true"}, json={"value": "hi"})
    res = client.get("/v1/segments/cart/flash/msg").json()
    assert res["current"] == "hi"
    assert res["previous"] == "hi"


def test_flash_keep_extends_one_request():
    client, _ = make_client()
    client.post("/v1/segments/cart/flash/msg", json={"value": "hi"})
    client.post("/v1/segments/cart/flash:keep")
    assert client.get("/v1/segments/cart/flash/msg").json()["current"] == "hi"
    assert client.get("/v1/segments/cart/flash/msg").json()["current"] is None


def test_flash_clear():
    client, _ = make_client()
    client.post("/v1/segments/cart/flash/msg", json={"value": "hi"})
    client.delete("/v1/segments/cart/flash")
    res = client.get("/v1/segments/cart/flash/msg").json()
    assert res["current"] is None
    assert res["previous"] is None


def test_csrf_token():
    client, _ = make_client()
    token = client.post("/v1/token").json()["token"]
    assert len(token) == 64
    assert client.post("/v1/token/verify", json={"token": token}).json() == {"valid": True}
    assert client.post("/v1/token/verify", json={"token": "0" * 64}).json() == {"valid": False}


def test_destroy_session_expires_cookie():
    client, backend = make_client()
    client.put("/v1/segments/cart/values/qty", json={"value": 3})
    res = client.delete("/v1/session")
    assert res.json() == {"destroyed": True}
    assert backend == {}
    assert f"{COOKIE}=" in res.headers["set-cookie"]
    assert client.get("/v1/segments/cart/values/qty").json()["value"] is None


def test_reserved_segment_name_is_rejected():
    client, _ = make_client()
    res = client.get("/v1/segments/_flash.next/values/x")
    assert res.status_code == 400


def test_metrics_exposes_session_counters():
    client, _ = make_client()
    client.put("/v1/segments/cart/values/qty", json={"value": 1})
    body = client.get("/metrics").text
    assert "session_started_total" in body
    assert "session_flash_rotations_total" in body


def test_flash_keep_route_is_registered():
    client, _ = make_client()
    assert client.post("/v1/segments/cart/flash:keep").status_code == 200


def test_token_segment_is_not_writable_through_segment_routes():
    client, _ = make_client()
    token = client.post("/v1/token").json()["token"]

    res = client.put(f"/v1/segments/{TOKEN_SEGMENT}/values/value", json={"value": "forged"})
    assert res.status_code == 400
    assert client.get(f"/v1/segments/{TOKEN_SEGMENT}/values/value").status_code == 400
    assert client.delete(f"/v1/segments/{TOKEN_SEGMENT}").status_code == 400
    assert client.post(f"/v1/segments/{TOKEN_SEGMENT}/flash:keep").status_code == 400

    assert client.post("/v1/token/verify", json={"token": "forged"}).json() == {"valid": False}
    assert client.post("/v1/token/verify", json={"token": token}).json() == {"valid": True}


class LoopCheckingStore(InMemorySessionStore):
    def __init__(self, backend):
        super().__init__(backend, name=COOKIE)
        self.wrote_on_loop: list[bool] = []

    def close_write(self, state):
        try:
            asyncio.get_running_loop()
            self.wrote_on_loop.append(True)
        except RuntimeError:
            self.wrote_on_loop.append(False)
        super().close_write(state)


def test_session_is_written_off_the_event_loop():
    backend: dict[str, str] = {}
    stores: list[LoopCheckingStore] = []

    def factory():
        stores.append(LoopCheckingStore(backend))
        return stores[-1]

    cfg = replace(settings, session_name=COOKIE, session_backend="memory")
    client = TestClient(create_app(cfg, store_factory=factory))
    client.put("/v1/segments/cart/values/qty", json={"value": 1})
    assert stores[0].wrote_on_loop == [False]
    assert len(backend) == 1


def test_started_counter_only_counts_new_sessions():
    client, _ = make_client()

    def started() -> float:
        return registry.get_sample_value("session_started_total") or 0.0

    before = started()
    client.put("/v1/segments/cart/values/qty", json={"value": 1})
    assert started() == before + 1
    client.put("/v1/segments/cart/values/qty", json={"value": 2})
    client.get("/v1/segments/cart/values/qty")
    assert started() == before + 1
