import pytest

from session_segments.application.ports.session_store_port import SessionStatus
from session_segments.application.segment import Segment
from session_segments.application.session_controller import SessionController
from session_segments.domain.errors import InvalidArgumentError
from session_segments.domain.flash import FLASH_CURRENT, FLASH_NEXT, FLASH_PREV
from session_segments.domain.session_state import SessionState
from session_segments.infrastructure.adapters.session.memory_store import InMemorySessionStore
from tests.unit._fakes import FakeStore, finish, request_controller


def test_cart_scenario():
    backend: dict[str, str] = {}
    ctl = request_controller(backend)
    cart = ctl.get_segment("cart")
    cart.set("qty", 3)
    assert cart.get("qty") == 3
    cart.flash("msg", "ok")
    sid = finish(ctl)

    ctl = request_controller(backend, sid)
    cart = ctl.get_segment("cart")
    assert cart.get("qty") == 3
    assert cart.flash_get("msg") == "ok"
    assert cart.flash_next_get("msg") is None


def test_get_does_not_start_a_session():
    store = InMemorySessionStore()
    ctl = SessionController(store)
    seg = ctl.get_segment("cart")
    assert seg.get("qty") is None
    assert seg.get("qty", 0) == 0
    assert "qty" not in seg
    seg.remove("qty")
    seg.clear()
    assert store.start_calls == 0
    assert store.status() == SessionStatus.NONE


def test_set_starts_a_session():
    store = InMemorySessionStore()
    SessionController(store).get_segment("cart").set("qty", 1)
    assert store.status() == SessionStatus.ACTIVE
    assert store.start_calls == 1


def test_flash_read_starts_a_session():
    store = InMemorySessionStore()
    assert SessionController(store).get_segment("cart").flash_get("msg", "none") == "none"
    assert store.status() == SessionStatus.ACTIVE


def test_remove_deletes_key():
    ctl = SessionController(FakeStore())
    seg = ctl.get_segment("cart")
    seg.set("qty", 1)
    seg.set("sku", "A1")
    seg.remove("qty")
    seg.remove("missing")
    assert seg.get("qty") is None
    assert seg.get("sku") == "A1"


def test_clear_only_touches_own_bucket():
    ctl = SessionController(FakeStore())
    cart, user = ctl.get_segment("cart"), ctl.get_segment("user")
    cart.set("qty", 1)
    user.set("id", 7)
    cart.flash("msg", "ok")
    cart.clear()
    assert ctl.state["cart"] == {}
    assert user.get("id") == 7
    assert cart.flash_next_get("msg") == "ok"


def test_segments_with_same_name_share_state():
    ctl = SessionController(FakeStore())
    a, b = ctl.get_segment("user"), ctl.get_segment("user")
    a.set("id", 7)
    assert b.get("id") == 7
    b.flash("msg", "hi")
    assert a.flash_next_get("msg") == "hi"


def test_item_access():
    ctl = SessionController(FakeStore())
    seg = ctl.get_segment("cart")
    assert "qty" not in seg
    seg["qty"] = 2
    assert seg["qty"] == 2
    assert "qty" in seg
    assert "sku" not in seg
    del seg["qty"]
    assert "qty" not in seg
    assert seg["qty"] is None


def test_contains_is_false_without_a_session():
    state = SessionState({"cart": {"qty": 1}})
    seg = SessionController(FakeStore(start_ok=False), state).get_segment("cart")
    assert "qty" not in seg


def test_flash_both_is_visible_now_and_next():
    ctl = SessionController(FakeStore())
    seg = ctl.get_segment("cart")
    seg.flash_both("msg", "ok")
    assert seg.flash_get("msg") == "ok"
    assert seg.flash_next_get("msg") == "ok"


def test_flash_clears():
    ctl = SessionController(FakeStore())
    seg = ctl.get_segment("cart")
    seg.flash_both("msg", "ok")
    ctl.state[FLASH_PREV]["data"]["cart"] = {"msg": "old"}

    seg.flash_clear()
    assert seg.flash_next_get("msg") is None
    assert seg.flash_get("msg") == "ok"

    seg.flash_clear_current()
    assert seg.flash_get("msg") is None

    assert seg.flash_previous_get("msg") == "old"
    seg.flash_clear_previous()
    assert seg.flash_previous_get("msg") is None

    seg.flash_both("msg", "again")
    seg.flash_clear_both()
    assert seg.flash_get("msg") is None
    assert seg.flash_next_get("msg") is None


def test_flash_clear_leaves_other_segments():
    ctl = SessionController(FakeStore())
    cart, user = ctl.get_segment("cart"), ctl.get_segment("user")
    cart.flash("msg", "c")
    user.flash("msg", "u")
    cart.flash_clear()
    assert user.flash_next_get("msg") == "u"


def test_flash_keep_does_not_clobber_next():
    ctl = SessionController(FakeStore())
    seg = ctl.get_segment("cart")
    seg.flash("k2", "next-2")
    ctl.state[FLASH_CURRENT]["data"]["cart"] = {"k1": "current-1", "k2": "current-2"}
    seg.flash_keep()
    assert seg.flash_next_get("k1") == "current-1"
    assert seg.flash_next_get("k2") == "next-2"


def test_flash_keep_carries_over_a_request():
    backend: dict[str, str] = {}
    ctl = request_controller(backend)
    ctl.get_segment("cart").flash("msg", "ok")
    sid = finish(ctl)

    ctl = request_controller(backend, sid)
    ctl.get_segment("cart").flash_keep()
    finish(ctl)

    ctl = request_controller(backend, sid)
    assert ctl.get_segment("cart").flash_get("msg") == "ok"


def test_load_repairs_corrupt_data():
    state = SessionState({
        "cart": "not a mapping",
        FLASH_PREV: "garbage",
        FLASH_CURRENT: {"tag": "current", "data": {"cart": ["x"]}},
    })
    ctl = SessionController(FakeStore(status=SessionStatus.ACTIVE), state)
    seg = ctl.get_segment("cart")
    assert seg.get("qty") is None
    assert state["cart"] == {}
    for key, tag in ((FLASH_PREV, "prev"), (FLASH_CURRENT, "current"), (FLASH_NEXT, "next")):
        assert state[key]["tag"] == tag
        assert state[key]["data"]["cart"] == {}


def test_writes_without_persistence_when_store_is_disabled():
    ctl = SessionController(InMemorySessionStore(enabled=False))
    seg = ctl.get_segment("cart")
    seg.set("qty", 1)
    assert seg.get("qty") == 1


@pytest.mark.parametrize("name", [123, None, "", "_flash.next"])
def test_invalid_segment_names(name):
    with pytest.raises(InvalidArgumentError):
        Segment(SessionController(FakeStore()), name)
