from __future__ import annotations

from datetime import datetime, timezone

import pytest

from chattrain.records import Message, Pair, RecordError, U64_MAX, parse_snowflake, parse_timestamp


def test_parse_snowflake_accepts_strings_and_ints():
    assert parse_snowflake("1088523571264938084") == 1088523571264938084
    assert parse_snowflake(42) == 42
    assert parse_snowflake(str(U64_MAX)) == U64_MAX


@pytest.mark.parametrize("value", ["", "-1", "12a", "1.5", 1.5, True, None, str(2**64), -3, " 7"])
def test_parse_snowflake_rejects_bad_values(value):
    with pytest.raises(RecordError):
        parse_snowflake(value)


def test_parse_timestamp_normalizes_to_utc():
    ts = parse_timestamp("2023-03-22T16:02:11.513000+02:00")
    assert ts == datetime(2023, 3, 22, 14, 2, 11, 513000, tzinfo=timezone.utc)
    assert ts.utcoffset().total_seconds() == 0


def test_parse_timestamp_treats_naive_as_utc():
    assert parse_timestamp("2023-03-22T14:02:11") == datetime(2023, 3, 22, 14, 2, 11, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["yesterday", "", 1679493731, None])
def test_parse_timestamp_rejects_garbage(value):
    with pytest.raises(RecordError):
        parse_timestamp(value)


def test_from_raw_keeps_only_the_referenced_id():
    m = Message.from_raw({
        "id": "5",
        "content": "sure",
        "timestamp": "2023-03-22T14:00:00+00:00",
        "author": {"id": "9", "username": "someone"},
        "message_reference": {"channel_id": "1", "guild_id": "2", "message_id": "4"},
        "attachments": [],
    })
    assert m == Message(id=5, content="sure", timestamp=datetime(2023, 3, 22, 14, tzinfo=timezone.utc),
                        author=9, reference=4)


@pytest.mark.parametrize("reference", [None, {}, {"message_id": None}, {"channel_id": "1"}])
def test_from_raw_reference_is_optional(reference):
    data = {"id": 1, "content": "", "timestamp": "2023-03-22T14:00:00Z", "author": {"id": 2}}
    if reference is not None:
        data["message_reference"] = reference
    m = Message.from_raw(data)
    assert m.reference is None
    assert m.content == ""


@pytest.mark.parametrize("drop, match", [
    ("id", "'id'"),
    ("content", "'content'"),
    ("timestamp", "'timestamp'"),
    ("author", "'author'"),
])
def test_from_raw_missing_required_field(drop, match):
    data = {"id": "1", "content": "x", "timestamp": "2023-03-22T14:00:00Z", "author": {"id": "2"}}
    del data[drop]
    with pytest.raises(RecordError, match=match):
        Message.from_raw(data)


def test_from_raw_missing_author_id():
    with pytest.raises(RecordError, match="author.id"):
        Message.from_raw({"id": "1", "content": "x", "timestamp": "2023-03-22T14:00:00Z", "author": {}})


def test_from_raw_rejects_non_string_content():
    with pytest.raises(RecordError, match="content"):
        Message.from_raw({"id": "1", "content": None, "timestamp": "2023-03-22T14:00:00Z", "author": {"id": "2"}})


def test_pair_as_dict_has_exactly_prompt_and_reply():
    assert Pair("a\nb", "c").as_dict() == {"prompt": "a\nb", "reply": "c"}
