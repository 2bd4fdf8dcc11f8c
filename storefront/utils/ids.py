"""
storefront/utils/ids.py

Prefixed, sortable entity identifiers.

Format: <prefix>_<26 char ULID>  e.g. prd_01K1XAVQNJ9CFYC5TXCRE2S56Z
The ULID part is 10 chars of millisecond timestamp followed by 16 chars of
randomness, both in Crockford base32, so ids sort by creation time.
"""

import os
import threading
import time
from enum import Enum
from typing import NamedTuple

ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ULID_LENGTH = 26
TIME_LENGTH = 10
RANDOM_LENGTH = 16

MAX_TIME = (1 << 48) - 1
MAX_RANDOM = (1 << 80) - 1

_DECODING = {ch: i for i, ch in enumerate(ENCODING)}


class EntityPrefix(str, Enum):
    USER = "usr"
    PRODUCT = "prd"
    CATEGORY = "cat"
    CART = "crt"
    CART_ITEM = "cit"
    USER_SESSION = "ses"
    IDEMPOTENCY_KEY = "idk"


_KNOWN_PREFIXES = {p.value for p in EntityPrefix}


class ParsedId(NamedTuple):
    prefix: str
    ulid: str
    full_id: str


def _encode(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        value, rem = divmod(value, 32)
        chars.append(ENCODING[rem])
    return "".join(reversed(chars))


def _decode(text: str) -> int:
    value = 0
    for ch in text:
        value = value * 32 + _DECODING[ch]
    return value


class MonotonicUlid:
    """
    ULID factory. Within one millisecond the random part is incremented
    instead of redrawn, so ids from one process stay strictly increasing.
    """

    def __init__(self, clock=time.time, entropy=os.urandom):
        self._clock = clock
        self._entropy = entropy
        self._lock = threading.Lock()
        self._last_time = -1
        self._last_random = 0

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def __call__(self) -> str:
        with self._lock:
            now = self._now_ms()
            #same millisecond, or the clock went backwards
            if now <= self._last_time:
                now = self._last_time
                rand = self._last_random + 1
                if rand > MAX_RANDOM:
                    while self._now_ms() <= self._last_time:
                        time.sleep(0.0005)
                    now = self._now_ms()
                    rand = int.from_bytes(self._entropy(10), "big")
            else:
                rand = int.from_bytes(self._entropy(10), "big")

            if now > MAX_TIME:
                raise ValueError(f"Timestamp {now} does not fit in a ULID")

            self._last_time = now
            self._last_random = rand

        return _encode(now, TIME_LENGTH) + _encode(rand, RANDOM_LENGTH)


new_ulid = MonotonicUlid()


def generate(prefix: EntityPrefix) -> str:
    return f"{EntityPrefix(prefix).value}_{new_ulid()}"


def generate_many(prefix: EntityPrefix, count: int) -> list[str]:
    return [generate(prefix) for _ in range(count)]


def is_ulid(text: str) -> bool:
    return (
        isinstance(text, str)
        and len(text) == ULID_LENGTH
        and all(ch in _DECODING for ch in text)
    )


def decode_time(ulid: str) -> int:
    """Millisecond timestamp of a bare ULID. Raises ValueError when malformed."""
    if not is_ulid(ulid):
        raise ValueError(f"Malformed ULID: {ulid!r}")
    ts = _decode(ulid[:TIME_LENGTH])
    if ts > MAX_TIME:
        raise ValueError(f"Malformed ULID: {ulid!r}")
    return ts


def parse(raw: str) -> ParsedId | None:
    if not isinstance(raw, str) or "_" not in raw:
        return None

    prefix, _, ulid = raw.partition("_")
    if not prefix or not is_ulid(ulid):
        return None

    return ParsedId(prefix=prefix, ulid=ulid, full_id=raw)


def is_valid(raw: str) -> bool:
    parsed = parse(raw)
    return parsed is not None and parsed.prefix in _KNOWN_PREFIXES


def validate_prefix(raw: str, expected: EntityPrefix) -> bool:
    parsed = parse(raw)
    return parsed is not None and parsed.prefix == getattr(expected, "value", expected)


def extract_ulid(raw: str) -> str | None:
    parsed = parse(raw)
    return parsed.ulid if parsed else None


def extract_prefix(raw: str) -> str | None:
    parsed = parse(raw)
    return parsed.prefix if parsed else None


def extract_timestamp(raw: str) -> int | None:
    parsed = parse(raw)
    if not parsed:
        return None
    try:
        return decode_time(parsed.ulid)
    except ValueError:
        return None


def new_user_id() -> str:
    return generate(EntityPrefix.USER)


def new_product_id() -> str:
    return generate(EntityPrefix.PRODUCT)


def new_category_id() -> str:
    return generate(EntityPrefix.CATEGORY)


def new_cart_id() -> str:
    return generate(EntityPrefix.CART)


def new_cart_item_id() -> str:
    return generate(EntityPrefix.CART_ITEM)
