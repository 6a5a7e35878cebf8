import datetime

import pytest

from models.common import engine_connect_args
from services.directory import clean_uid, is_online, user_summary
from services.errors import ValidationError

NOW = datetime.datetime(2026, 10, 1, 12, 0, tzinfo=datetime.timezone.utc)


def test_is_online_window():
    assert is_online(NOW - datetime.timedelta(seconds=299), now=NOW) is True
    assert is_online(NOW - datetime.timedelta(seconds=300), now=NOW) is False
    assert is_online(None, now=NOW) is False


def test_is_online_treats_naive_as_utc():
    naive = (NOW - datetime.timedelta(minutes=1)).replace(tzinfo=None)
    assert is_online(naive, now=NOW) is True


@pytest.mark.parametrize("uid", ["AAA111", " abc123 ", "12345678901"])
def test_clean_uid_accepts(uid):
    assert clean_uid(uid) == uid.strip()


@pytest.mark.parametrize("uid", [None, "", "   "])
def test_clean_uid_empty(uid):
    with pytest.raises(ValidationError, match="UID cannot be empty"):
        clean_uid(uid)


@pytest.mark.parametrize("uid", ["123456789012", "abc-123", "a b", "ünï"])
def test_clean_uid_invalid(uid):
    with pytest.raises(ValidationError, match="Invalid UID"):
        clean_uid(uid)


def test_user_summary_is_camel_case(alice):
    summary = user_summary(alice).model_dump(by_alias=True)
    assert summary == {
        "userId": "u1",
        "uid": "AAA111",
        "username": "alice",
        "nickname": "Alice",
        "avatarUrl": None,
        "isOnline": True,
    }


def test_engine_connect_args():
    assert engine_connect_args("postgresql+psycopg://db/x", 1500) == {
        "options": "-c statement_timeout=1500"
    }
    assert engine_connect_args("sqlite:///x.sqlite", 1500) == {"timeout": 1.5}
    assert engine_connect_args("mysql://db/x", 1500) == {}
