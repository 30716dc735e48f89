from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from chattrain.records import Message

T0 = datetime(2023, 3, 22, 14, 0, tzinfo=timezone.utc)
ME = 203210712233820160


def at(minutes: float) -> datetime:
    return T0 + timedelta(minutes=minutes)


def msg(id, author, minutes, content="", reference=None) -> Message:
    return Message(id=id, content=content, timestamp=at(minutes), author=author, reference=reference)


def raw(id, author, minutes, content="", reference=None) -> dict:
    out = {
        "id": str(id),
        "type": 0,
        "content": content,
        "channel_id": "1000",
        "author": {"id": str(author), "username": f"user{author}"},
        "attachments": [],
        "timestamp": at(minutes).isoformat(),
        "edited_timestamp": None,
    }
    if reference is not None:
        out["message_reference"] = {"channel_id": "1000", "message_id": str(reference)}
    return out


def write_messages(path, messages) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(messages), encoding="utf-8")


@pytest.fixture
def archive(tmp_path):
    """
    general/       channel + one thread (+ one thread dir with no file)
    random/        channel, no threads dir
    empty/         nothing at all
    """
    root = tmp_path / "archive"
    write_messages(root / "general" / "channel_messages.json", [
        raw(3, 2, 2, "how do I build this?"),
        raw(1, 1, 0, "morning"),
        raw(2, 1, 1, "anyone around"),
        raw(4, ME, 3, "run make"),
    ])
    write_messages(root / "general" / "threads" / "t1" / "thread_messages.json", [
        raw(10, 5, 0, "thread start"),
        raw(11, 5, 1, "ping"),
        raw(12, ME, 2, "pong"),
    ])
    (root / "general" / "threads" / "t2").mkdir(parents=True)
    write_messages(root / "random" / "channel_messages.json", [
        raw(20, 7, 0, "first"),
        raw(21, 7, 1, "second"),
        raw(22, ME, 30, "too late"),
    ])
    (root / "empty").mkdir()
    (root / "README.txt").write_text("not a channel", encoding="utf-8")
    return root
