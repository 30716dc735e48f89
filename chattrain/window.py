"""
Reply-context windowing.

For every message by the target author, walk backward through the sorted
timeline and gather what other people said just before it:

    - at most `max_lines` non-empty lines,
    - nothing older than `max_age` before the reference time,
    - stop at the first line by the target author.

If the reply points at an earlier message (`reference`), the walk starts at
that message and the age cutoff is measured from its timestamp instead of the
reply's own.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from .records import Message, Pair

MAX_LINES = 5
MAX_AGE = timedelta(minutes=10)


def resolve_reference(messages: Sequence[Message], index: int) -> Tuple[int, datetime]:
    """
    Return (cursor, reference_time) for the reply at `index`.

    The reference scan covers messages[0 : index - 1]; the message right before
    the reply is never matched here (the walk still reaches it). An id that is
    not found falls back to the previous message and the reply's own time.
    """
    reply = messages[index]
    if reply.reference is not None:
        for position in range(index - 1):
            if messages[position].id == reply.reference:
                return position, messages[position].timestamp
    return index - 1, reply.timestamp


def collect_context(
    messages: Sequence[Message],
    cursor: int,
    reference_time: datetime,
    target_author: int,
    max_lines: int = MAX_LINES,
    max_age: timedelta = MAX_AGE,
) -> List[str]:
    """Lines from messages[cursor] back to messages[1], oldest first. Position 0 is never read."""
    lines: List[str] = []
    for position in range(cursor, 0, -1):
        message = messages[position]
        if len(lines) >= max_lines:
            break
        if message.author == target_author:
            break
        if reference_time - message.timestamp > max_age:
            break
        # attachment-only messages still use up a step
        if message.content:
            lines.append(message.content)
    lines.reverse()
    return lines


def window(
    messages: Sequence[Message],
    target_author: int,
    *,
    max_lines: int = MAX_LINES,
    max_age: timedelta = MAX_AGE,
) -> List[Pair]:
    pairs: List[Pair] = []
    for index, message in enumerate(messages):
        if message.author != target_author or not message.content:
            continue
        if index == 0:
            continue
        cursor, reference_time = resolve_reference(messages, index)
        lines = collect_context(messages, cursor, reference_time, target_author, max_lines, max_age)
        if not lines:
            continue
        pairs.append(Pair(prompt="\n".join(lines), reply=message.content))
    return pairs
