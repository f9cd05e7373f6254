from datetime import datetime, timezone

from app.core.datetime_utils import from_unix_ms, iso_utc, unix_ms


def test_unix_ms_is_strictly_increasing():
    values = [unix_ms() for _ in range(500)]
    assert values == sorted(set(values))


def test_iso_utc_has_millisecond_precision():
    assert iso_utc(from_unix_ms(1767225600500)) == "2026-01-01T00:00:00.500Z"


def test_iso_utc_treats_naive_as_utc():
    assert iso_utc(datetime(2026, 3, 4, 5, 6, 7, 890000)) == "2026-03-04T05:06:07.890Z"
    assert from_unix_ms(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
