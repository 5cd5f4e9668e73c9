from datetime import timedelta

import pytest

from scripts.config import env_bool, parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [
        ("12h", timedelta(hours=12)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("90s", timedelta(seconds=90)),
        ("500ms", timedelta(milliseconds=500)),
        ("1.5h", timedelta(minutes=90)),
        ("250us", timedelta(microseconds=250)),
    ],
)
def test_parse_duration(text, expected) -> None:
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "12", "h", "12 hours", "1h 30m", "-1h"])
def test_parse_duration_rejects_garbage(text) -> None:
    with pytest.raises(ValueError):
        parse_duration(text)


def test_env_bool(monkeypatch) -> None:
    monkeypatch.setenv("USE_HYPERTABLE", "false")
    monkeypatch.setenv("IN_TABLE_TAG", "Yes")
    monkeypatch.delenv("TIME_INDEX", raising=False)
    assert env_bool("USE_HYPERTABLE", True) is False
    assert env_bool("IN_TABLE_TAG") is True
    assert env_bool("TIME_INDEX", True) is True
