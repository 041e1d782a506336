from __future__ import annotations

from typing import List, Optional

from application.session import InputEvent


KEYS = {
    "w": InputEvent.UP,
    "s": InputEvent.DOWN,
    "a": InputEvent.LEFT,
    "d": InputEvent.RIGHT,
    "e": InputEvent.CONFIRM,
    " ": InputEvent.CONFIRM,
}

WORDS = {
    "up": InputEvent.UP,
    "down": InputEvent.DOWN,
    "left": InputEvent.LEFT,
    "right": InputEvent.RIGHT,
    "enter": InputEvent.CONFIRM,
}


def parse_key(key: str) -> Optional[InputEvent]:
    """
    Map a single key to an event.

    Keys are case-insensitive; anything unmapped returns None and is
    ignored by the game loop.
    """

    if len(key) != 1:
        raise ValueError(f"Expected a single key, got {key!r}")
    return KEYS.get(key.lower())


def parse_line(line: str) -> List[InputEvent]:
    """
    Turn one line of console input into events.

    Format:
      ""              -> confirm
      "up" / "enter"  -> one event per direction word
      "ddse"          -> one event per recognised key, others dropped
    """

    if not line.strip():
        return [InputEvent.CONFIRM]

    word = WORDS.get(line.strip().lower())
    if word is not None:
        return [word]

    events = []
    for key in line.rstrip("\r\n"):
        event = parse_key(key)
        if event is not None:
            events.append(event)
    return events
