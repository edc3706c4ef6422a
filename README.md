# slotroute

Work out where a command should go in a cluster of key-value servers.

The key space is split into 16384 hash slots (`SLOT_SIZE`). A key's slot is
the CRC16 (XMODEM) of the key modulo 16384. If the key holds a non-empty
`{hashtag}` (the text between the first `{` and the next `}`), only the tag
is hashed, so keys such as `{user}name` and `{user}email` land in the same
slot.

## Install

```
pip install slotroute
```

## Use

Everything lives in `slotroute.routing`.

```python
from slotroute.routing import (
    RouteKind, RoutingInfo, Slot, crc16_xmodem, for_args, for_key, get_hashtag, key_slot,
)

crc16_xmodem(b"123456789")                    # 0x31C3
get_hashtag(b"foo{bar}baz")                   # b"bar"
get_hashtag(b"foo{}{baz}")                    # None: the first tag is empty
key_slot(b"foo{bar}baz") == key_slot(b"bar")  # True

route = for_args([b"SET", b"mykey", b"value"])
route.kind is RouteKind.SLOT                  # True
route.slot == key_slot(b"mykey")              # True
route == for_key(b"mykey")                    # True

for_args([b"FLUSHALL"]).kind                  # RouteKind.ALL_MASTERS
for_args([b"PING"]).kind                      # RouteKind.ALL_NODES
for_args([b"EVAL", b"script", b"0"]).kind     # RouteKind.RANDOM
for_args([b"xread", b"streams", b"s1", b"0"]) # slot of b"s1"
for_args([b"SCAN", b"0"])                     # None: cannot be routed
```

### Routing rules

`for_args` takes a command as a sequence of arguments, the command name
first. Arguments may be `bytes`, `bytearray`, `memoryview`, `str` (encoded
as UTF-8) or `int` (written in decimal); anything else counts as absent.
Command names and the `STREAMS` keyword are matched without regard to case.

- `FLUSHALL`, `FLUSHDB`, `SCRIPT`: all masters.
- `ECHO`, `CONFIG`, `CLIENT`, `SLOWLOG`, `DBSIZE`, `LASTSAVE`, `PING`,
  `INFO`, `BGREWRITEAOF`, `BGSAVE`, `SAVE`, `TIME`, `KEYS`: all nodes.
- `SCAN`, `SHUTDOWN`, `SLAVEOF`, `REPLICAOF`, `MOVE`, `BITOP`: `None`.
- `EVAL`, `EVALSHA`: a key count of `0` routes to a random node; otherwise
  the first key decides the slot. A missing or non-numeric key count gives
  `None`.
- `XGROUP`, `XINFO`: the third argument is the key.
- `XREAD`, `XREADGROUP`: the argument after `STREAMS` is the key; without
  `STREAMS`, `None`.
- Anything else: the second argument is the key, or a random node when
  there is no second argument.

`for_args` returns `None` for an empty command.

### Types

- `RouteKind`: `ALL_NODES`, `ALL_MASTERS`, `RANDOM`, `SLOT`.
- `RoutingInfo(kind, slot=None)`: a frozen dataclass; `slot` is required for
  `SLOT` and must be in `[0, 16384)`, and is refused for the other kinds
  (`ValueError`). Built with `RoutingInfo.all_nodes()`,
  `RoutingInfo.all_masters()`, `RoutingInfo.random()` and
  `RoutingInfo.for_slot(slot)`.
- `Slot(start, end, master, replicas=[])`: a slot range as reported by a
  cluster, with the master address and the replica addresses.

`key_slot` raises `TypeError` for a key that is not bytes-like, a string or
an integer.

## What it does not do

slotroute only computes routing decisions. It does not open connections,
send commands, query a cluster for its slot map, follow redirections or
provide a command-line tool; pair it with a client that does.

## Tests

```
pip install -e ".[test]"
pytest
```