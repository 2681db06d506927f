"""Derive a short session title from the first user message."""

import re

DEFAULT_TITLE = "New chat"
MAX_TITLE_LENGTH = 20
MAX_TITLE_WORDS = 3

_MARKUP_RE = re.compile(r"[#*`_~\[\]()]")


def generate_chat_title(content: str) -> str:
    """Keep the first three words longer than two characters, markup removed.

    Titles over 20 characters are cut to 17 and end with "...". Falls back to
    "New chat" when no word survives.
    """
    cleaned = _MARKUP_RE.sub("", content or "").strip()
    words = [word for word in cleaned.split() if len(word) > 2]
    title = " ".join(words[:MAX_TITLE_WORDS])
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:17] + "..."
    return title or DEFAULT_TITLE


def title_for_messages(messages) -> str:
    """Title from the first user-role message, or the default if there is none."""
    for message in messages:
        if message.role == "user":
            return generate_chat_title(message.content)
    return DEFAULT_TITLE
