import re
import time

import pytest

from storefront.utils import ids
from storefront.utils.ids import EntityPrefix, MonotonicUlid

ULID_RE = re.compile(r"^[0123456789ABCDEFGHJKMNPQRSTVWXYZ]{26}$")


@pytest.mark.parametrize("prefix", list(EntityPrefix))
def test_generated_id_parses_back_to_its_prefix(prefix):
    value = ids.generate(prefix)

    parsed = ids.parse(value)
    assert parsed is not None
    assert parsed.prefix == prefix.value
    assert ULID_RE.match(parsed.ulid)
    assert ids.is_valid(value)
    assert ids.validate_prefix(value, prefix)


def test_typed_shortcuts_use_their_prefix():
    assert ids.new_user_id().startswith("usr_")
    assert ids.new_product_id().startswith("prd_")
    assert ids.new_category_id().startswith("cat_")
    assert ids.new_cart_id().startswith("crt_")
    assert ids.new_cart_item_id().startswith("cit_")


@pytest.mark.parametrize(
    "raw",
    [
        "usr01K1XAVQNJ9CFYC5TXCRE2S56Z",
        "",
        "_01K1XAVQNJ9CFYC5TXCRE2S56Z",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S5",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S56ZZ",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S56I",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S56L",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S56O",
        "usr_01K1XAVQNJ9CFYC5TXCRE2S56U",
        "usr_01k1xavqnj9cfyc5txcre2s56z",
        None,
        12345,
    ],
)
def test_parse_rejects_malformed_input_without_raising(raw):
    assert ids.parse(raw) is None
    assert ids.is_valid(raw) is False
    assert ids.extract_timestamp(raw) is None


def test_unknown_prefix_parses_but_is_not_valid():
    raw = "abc_01K1XAVQNJ9CFYC5TXCRE2S56Z"

    assert ids.parse(raw).prefix == "abc"
    assert ids.is_valid(raw) is False


def test_validate_prefix_compares_with_expected():
    product_id = ids.new_product_id()

    assert ids.validate_prefix(product_id, EntityPrefix.PRODUCT)
    assert not ids.validate_prefix(product_id, EntityPrefix.CATEGORY)
    assert not ids.validate_prefix("garbage", EntityPrefix.PRODUCT)


def test_extract_helpers():
    raw = "prd_01K1XAVQNJ9CFYC5TXCRE2S56Z"

    assert ids.extract_prefix(raw) == "prd"
    assert ids.extract_ulid(raw) == "01K1XAVQNJ9CFYC5TXCRE2S56Z"
    assert ids.extract_prefix("nope") is None
    assert ids.extract_ulid("nope") is None


def test_extract_timestamp_is_close_to_generation_time():
    before = int(time.time() * 1000)
    value = ids.generate(EntityPrefix.CART)
    after = int(time.time() * 1000)

    ts = ids.extract_timestamp(value)
    assert before - 2000 <= ts <= after + 2000


def test_decode_time_rejects_overflowing_timestamp():
    with pytest.raises(ValueError):
        ids.decode_time("8ZZZZZZZZZ" + "0" * 16)

    assert ids.extract_timestamp("usr_8ZZZZZZZZZ" + "0" * 16) is None


def test_decode_time_rejects_malformed_ulid():
    with pytest.raises(ValueError):
        ids.decode_time("not-a-ulid")


def test_ids_are_monotonic_within_the_same_millisecond():
    factory = MonotonicUlid(clock=lambda: 1700000000.123, entropy=lambda n: b"\x10" * n)

    values = [factory() for _ in range(50)]

    assert values == sorted(values)
    assert len(set(values)) == 50
    assert len({v[:10] for v in values}) == 1


def test_ids_stay_monotonic_when_clock_goes_backwards():
    ticks = iter([1700000000.500, 1700000000.100, 1700000000.050])
    factory = MonotonicUlid(clock=lambda: next(ticks))

    first, second, third = factory(), factory(), factory()

    assert first < second < third


def test_random_overflow_waits_for_next_millisecond():
    ticks = iter([1.0005, 1.0005, 1.0005, 1.0025, 1.0025])
    factory = MonotonicUlid(clock=lambda: next(ticks), entropy=lambda n: b"\xff" * n)

    first = factory()
    second = factory()

    assert ids.decode_time(first) == 1000
    assert ids.decode_time(second) == 1002
    assert first < second


def test_generate_many_returns_sorted_unique_ids():
    values = ids.generate_many(EntityPrefix.PRODUCT, 20)

    assert len(set(values)) == 20
    assert values == sorted(values)
