import pytest
from hypothesis import given, strategies as st

from slotroute.routing import (
    SLOT_SIZE,
    RouteKind,
    RoutingInfo,
    Slot,
    crc16_xmodem,
    for_args,
    for_key,
    get_hashtag,
    key_slot,
)


def test_get_hashtag():
    assert get_hashtag(b"foo{bar}baz") == b"bar"
    assert get_hashtag(b"foo{}{baz}") is None
    assert get_hashtag(b"foo{{bar}}zap") == b"{bar"


def test_get_hashtag_missing_braces():
    assert get_hashtag(b"plainkey") is None
    assert get_hashtag(b"open{only") is None
    assert get_hashtag(b"}before{") is None


def test_crc16_check_value():
    assert crc16_xmodem(b"123456789") == 0x31C3
    assert crc16_xmodem(b"") == 0


def test_key_slot_known_values():
    assert key_slot(b"foo") == 12182
    assert key_slot("bar") == 5061
    assert key_slot(b"123456789") == 12739


def test_key_slot_uses_hashtag():
    assert key_slot("{user1000}.following") == key_slot("{user1000}.followers")
    assert key_slot("{user1000}.following") == key_slot("user1000")


def test_key_slot_rejects_non_key():
    with pytest.raises(TypeError):
        key_slot(None)


def test_for_key():
    assert for_key(b"foo") == RoutingInfo(RouteKind.SLOT, 12182)


def test_routing_info_validation():
    with pytest.raises(ValueError):
        RoutingInfo(RouteKind.SLOT)
    with pytest.raises(ValueError):
        RoutingInfo(RouteKind.SLOT, SLOT_SIZE)
    with pytest.raises(ValueError):
        RoutingInfo(RouteKind.RANDOM, 3)


def test_routing_info_mixed_capitalization():
    upper = for_args(["XREAD", "STREAMS", "foo", 0])
    lower = for_args(["xread", "streams", "foo", 0])
    mixed = for_args(["xReAd", "StReAmS", "foo", 0])
    assert upper == lower == mixed == for_key("foo")


@pytest.mark.parametrize(
    "args, expected",
    [
        (["FLUSHALL", ""], RoutingInfo.all_masters()),
        (["ECHO", ""], RoutingInfo.all_nodes()),
        (["SET", "42"], for_key("42")),
        (["XINFO", "GROUPS", "FOOBAR"], for_key("FOOBAR")),
        (["EVAL", "FOO", "0", "BAR"], RoutingInfo.random()),
        (["EVAL", "FOO", "4", "BAR"], for_key("BAR")),
        (["XREAD", "STREAMS", "4"], for_key("4")),
        (["XREAD", "FOO", "STREAMS", "4"], for_key("4")),
    ],
)
def test_routing_info(args, expected):
    assert for_args(args) == expected
    assert for_args([a.encode() for a in args]) == expected


@pytest.mark.parametrize(
    "args",
    [
        ["SCAN", "0"],
        ["shutdown"],
        ["BITOP", "AND", "dest", "a"],
        ["EVAL", "script", "notanumber", "k"],
        ["EVAL", "script", "-1", "k"],
        ["EVAL", "script", "2"],
        ["XREAD", "COUNT", "2"],
        ["XGROUP", "CREATE"],
        [],
        [None, "x"],
    ],
)
def test_unroutable(args):
    assert for_args(args) is None


def test_default_without_key_is_random():
    assert for_args(["MULTI"]) == RoutingInfo.random()
    assert for_args(["GET", None]) == RoutingInfo.random()


def test_eval_plus_sign_count():
    assert for_args(["EVALSHA", "sha", "+1", "k"]) == for_key("k")


def test_integer_key_argument():
    assert for_args(["GET", 42]) == for_key("42")


def test_slot_fields():
    slot = Slot(0, 5460, "127.0.0.1:7000", ["127.0.0.1:7003"])
    assert (slot.start, slot.end, slot.master, slot.replicas) == (
        0,
        5460,
        "127.0.0.1:7000",
        ["127.0.0.1:7003"],
    )
    assert Slot(1, 2, "m").replicas == []


@given(st.binary())
def test_key_slot_in_range(key):
    assert 0 <= key_slot(key) < SLOT_SIZE


@given(st.binary(min_size=1).filter(lambda b: b"}" not in b), st.binary(), st.binary())
def test_hashtag_invariance(tag, prefix, suffix):
    prefix = prefix.replace(b"{", b"")
    assert key_slot(prefix + b"{" + tag + b"}" + suffix) == key_slot(tag)


@given(st.text(alphabet="abcdefgh", min_size=1))
def test_default_routes_by_first_key(key):
    assert for_args(["GET", key]).slot == key_slot(key)