from __future__ import annotations

from livestreams.bot.formatters import split_message


def test_split_message_keeps_short_text():
    assert split_message("short", max_length=20) == ["short"]


def test_split_message_splits_on_paragraphs():
    text = "first paragraph\n\nsecond paragraph"

    assert split_message(text, max_length=20) == ["first paragraph", "second paragraph"]


def test_split_message_splits_long_paragraph_on_words():
    words = [f"word{i:02d}" for i in range(20)]
    text = "intro\n\n" + " ".join(words)

    parts = split_message(text, max_length=30)

    assert parts[0] == "intro"
    assert all(len(part) <= 30 for part in parts)
    assert " ".join(parts[1:]).split() == words
