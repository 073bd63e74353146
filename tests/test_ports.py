import pytest

from core.ports import InvalidPortSpec, parse_ports


def test_comma_list():
    assert parse_ports("80,443") == [80, 443]


def test_range_is_inclusive():
    assert parse_ports("1-5") == [1, 2, 3, 4, 5]


def test_whitespace_tolerant():
    assert parse_ports("  80 , 443 ") == [80, 443]
    assert parse_ports(" 20 - 22 ") == [20, 21, 22]


def test_empty_tokens_are_skipped():
    assert parse_ports("80,,443,") == [80, 443]


def test_single_port():
    assert parse_ports("22") == [22]


def test_unparseable_tokens_are_dropped_silently():
    assert parse_ports("80,http,443,8o") == [80, 443]


def test_unparseable_range_bound_counts_as_zero():
    # kept best-effort behaviour: "x-3" scans 0..3
    assert parse_ports("x-3") == [0, 1, 2, 3]
    assert parse_ports("5-y") == []


def test_reversed_range_is_empty():
    assert parse_ports("10-5") == []


def test_order_and_duplicates_preserved():
    assert parse_ports("443,80,443") == [443, 80, 443]


def test_range_with_extra_bound_is_rejected():
    with pytest.raises(InvalidPortSpec):
        parse_ports("1-2-3")
