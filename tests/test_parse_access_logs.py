from __future__ import annotations

import pytest

from parse_access_logs import (
    AccessTime,
    Discard,
    decode_month,
    extract_datetime,
    scan_fields,
    second_level_domain,
    split_domain,
)


ENTRY = b'203.0.113.5 - - [14/Mar/2024:10:22:31 +0000] "GET / HTTP/1.1" 200 512'


def test_scan_fields_splits_domain_from_payload() -> None:
    assert scan_fields(b"www.example.com " + ENTRY) == (b"www.example.com", ENTRY)


def test_scan_fields_skips_leading_and_separating_spaces() -> None:
    assert scan_fields(b"   example.com     x y ") == (b"example.com", b"x y ")


def test_scan_fields_treats_only_space_as_separator() -> None:
    # a tab is part of the identifier
    assert scan_fields(b"a.b\tc d") == (b"a.b\tc", b"d")


@pytest.mark.parametrize("line", [b"", b"    ", b"example.com", b"example.com   "])
def test_scan_fields_discards_lines_without_domain_or_payload(line: bytes) -> None:
    result = scan_fields(line)
    assert isinstance(result, Discard)
    assert result.diagnose is False


def test_split_domain_keeps_empty_labels() -> None:
    assert split_domain("a..b") == ["a", "", "b"]
    assert split_domain("localhost") == ["localhost"]


def test_second_level_domain_uses_last_two_labels() -> None:
    assert second_level_domain("www.shop.example.com") == "example.com"
    assert second_level_domain("example.com") == "example.com"
    assert second_level_domain("Example.COM") == "Example.COM"


def test_second_level_domain_rejects_single_label_silently() -> None:
    result = second_level_domain("localhost")
    assert isinstance(result, Discard)
    assert result.diagnose is False


def test_extract_datetime_parses_all_fields() -> None:
    assert extract_datetime(ENTRY) == AccessTime(
        year=2024, month=3, day=14, hour=10, minute=22, second=31, offset=0
    )


def test_extract_datetime_keeps_raw_signed_offset() -> None:
    assert extract_datetime(b"[01/Dec/1999:23:59:59 +0530]").offset == 530
    assert extract_datetime(b"[01/Dec/1999:23:59:59 -0800]").offset == -800


def test_extract_datetime_finds_signature_anywhere() -> None:
    result = extract_datetime(b'"GET /[x] HTTP/1.0" [bogus] [05/Jul/2023:00:00:01 +0200] tail')
    assert (result.year, result.month, result.day) == (2023, 7, 5)


@pytest.mark.parametrize(
    "entry",
    [
        b"no timestamp here",
        b"[14/Mar/24:10:22:31 +0000]",
        b"[14/Mar/2024:10:22:31 0000]",
        b"[14/Mar/2024:10:22:31 +000]",
        b"[1a/Mar/2024:10:22:31 +0000]",
        b"14/Mar/2024:10:22:31 +0000",
    ],
)
def test_extract_datetime_reports_missing_signature(entry: bytes) -> None:
    result = extract_datetime(entry)
    assert isinstance(result, Discard)
    assert result.diagnose is True
    assert result.reason == "Date & time not found or not complete"


def test_extract_datetime_month_is_case_sensitive() -> None:
    result = extract_datetime(b"[14/mar/2024:10:22:31 +0000]")
    assert result == Discard("invalid_month", "Invalid month 'mar'", diagnose=True)


def test_extract_datetime_uses_first_signature_even_if_invalid() -> None:
    result = extract_datetime(b"[14/Xyz/2024:10:22:31 +0000] [14/Mar/2024:10:22:31 +0000]")
    assert isinstance(result, Discard)


def test_decode_month_table() -> None:
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    assert [decode_month(m) for m in months] == list(range(1, 13))
    assert isinstance(decode_month("Sept"), Discard)


def test_extract_datetime_escapes_undecodable_month() -> None:
    result = extract_datetime(b"[01/\xff\xfeA/2024:00:00:00 +0000]")
    assert result == Discard("invalid_month", "Invalid month '\\xff\\xfeA'", diagnose=True)
