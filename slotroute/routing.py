"""Cluster slot routing: decide which node(s) a command should be sent to."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

SLOT_SIZE = 16384

_U64_MAX = 2**64 - 1

Arg = Union[bytes, bytearray, memoryview, str, int]

_ALL_MASTERS = frozenset({b"FLUSHALL", b"FLUSHDB", b"SCRIPT"})
_ALL_NODES = frozenset(
    {
        b"ECHO",
        b"CONFIG",
        b"CLIENT",
        b"SLOWLOG",
        b"DBSIZE",
        b"LASTSAVE",
        b"PING",
        b"INFO",
        b"BGREWRITEAOF",
        b"BGSAVE",
        b"CLIENT LIST",
        b"SAVE",
        b"TIME",
        b"KEYS",
    }
)
_UNROUTABLE = frozenset(
    {
        b"SCAN",
        b"CLIENT SETNAME",
        b"SHUTDOWN",
        b"SLAVEOF",
        b"REPLICAOF",
        b"SCRIPT KILL",
        b"MOVE",
        b"BITOP",
    }
)


class RouteKind(enum.Enum):
    """Where a command is to be sent."""

    ALL_NODES = "all_nodes"
    ALL_MASTERS = "all_masters"
    RANDOM = "random"
    SLOT = "slot"


@dataclass(frozen=True)
class RoutingInfo:
    """A routing decision; ``slot`` is set only for ``RouteKind.SLOT``."""

    kind: RouteKind
    slot: int | None = None

    def __post_init__(self) -> None:
        if self.kind is RouteKind.SLOT:
            if self.slot is None or not 0 <= self.slot < SLOT_SIZE:
                raise ValueError(f"slot routing needs a slot in [0, {SLOT_SIZE})")
        elif self.slot is not None:
            raise ValueError(f"{self.kind.name} routing takes no slot")

    @classmethod
    def all_nodes(cls) -> RoutingInfo:
        return cls(RouteKind.ALL_NODES)

    @classmethod
    def all_masters(cls) -> RoutingInfo:
        return cls(RouteKind.ALL_MASTERS)

    @classmethod
    def random(cls) -> RoutingInfo:
        return cls(RouteKind.RANDOM)

    @classmethod
    def for_slot(cls, slot: int) -> RoutingInfo:
        return cls(RouteKind.SLOT, slot)


@dataclass
class Slot:
    """A contiguous slot range served by a master and its replicas."""

    start: int
    end: int
    master: str
    replicas: list[str] = field(default_factory=list)


def crc16_xmodem(data: bytes) -> int:
    """CRC-16/XMODEM (poly 0x1021, init 0) of ``data``."""
    crc = 0
    for byte in bytes(data):
        crc ^= byte << 8
        for _ in range(8):
            crc = ((crc << 1) ^ 0x1021) if crc & 0x8000 else (crc << 1)
            crc &= 0xFFFF
    return crc


def get_hashtag(key: bytes) -> bytes | None:
    """Return the non-empty text between the first ``{`` and the next ``}``."""
    key = bytes(key)
    open_pos = key.find(b"{")
    if open_pos < 0:
        return None
    close_pos = key.find(b"}", open_pos)
    if close_pos < 0:
        return None
    tag = key[open_pos + 1 : close_pos]
    return tag or None


def key_slot(key: Arg) -> int:
    """The cluster slot a key hashes to, honouring hash tags."""
    raw = _as_bytes(key)
    if raw is None:
        raise TypeError(f"cannot use {type(key).__name__} as a key")
    tag = get_hashtag(raw)
    return crc16_xmodem(tag if tag is not None else raw) % SLOT_SIZE


def for_key(key: Arg) -> RoutingInfo:
    """Slot routing for a single key."""
    return RoutingInfo.for_slot(key_slot(key))


def for_args(args: Sequence[object]) -> RoutingInfo | None:
    """Routing for a command given as its arguments, the command name first.

    Returns ``None`` when the command cannot be routed safely.
    Arguments that are not bytes, strings or integers count as absent.
    """
    data = [_as_bytes(arg) for arg in args]

    def arg_idx(idx: int) -> bytes | None:
        return data[idx] if idx < len(data) else None

    name = arg_idx(0)
    if name is None:
        return None
    command = name.upper()

    if command in _ALL_MASTERS:
        return RoutingInfo.all_masters()
    if command in _ALL_NODES:
        return RoutingInfo.all_nodes()
    if command in _UNROUTABLE:
        return None
    if command in (b"EVALSHA", b"EVAL"):
        key_count = _parse_u64(arg_idx(2))
        if key_count is None:
            return None
        if key_count == 0:
            return RoutingInfo.random()
        key = arg_idx(3)
        return for_key(key) if key is not None else None
    if command in (b"XGROUP", b"XINFO"):
        key = arg_idx(2)
        return for_key(key) if key is not None else None
    if command in (b"XREAD", b"XREADGROUP"):
        position = next(
            (i for i, arg in enumerate(data) if arg is not None and arg.lower() == b"streams"),
            None,
        )
        if position is None:
            return None
        key = arg_idx(position + 1)
        return for_key(key) if key is not None else None

    key = arg_idx(1)
    return for_key(key) if key is not None else RoutingInfo.random()


def _as_bytes(arg: object) -> bytes | None:
    if isinstance(arg, (bytes, bytearray, memoryview)):
        return bytes(arg)
    if isinstance(arg, str):
        return arg.encode("utf-8")
    if isinstance(arg, int) and not isinstance(arg, bool):
        return str(arg).encode("ascii")
    return None


def _parse_u64(raw: bytes | None) -> int | None:
    if raw is None:
        return None
    digits = raw[1:] if raw.startswith(b"+") else raw
    if not digits or not digits.isdigit():
        return None
    value = int(digits)
    return value if value <= _U64_MAX else None