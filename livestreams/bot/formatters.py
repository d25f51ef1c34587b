from datetime import datetime
from typing import Optional

from livestreams.db.models import Channel, Stream, StreamStatus

TELEGRAM_MAX_LENGTH = 4096

STATUS_LABELS = {
    StreamStatus.UPCOMING: "🗓 upcoming",
    StreamStatus.LIVE: "🔴 live",
    StreamStatus.FINISHED: "🏁 finished",
}


def escape_html(text: str) -> str:
    """Escape only necessary HTML special characters for Telegram."""
    # Telegram only requires &, <, > to be escaped
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def split_message(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split a long message on blank lines so each part fits one Telegram message."""
    if len(text) <= max_length:
        return [text]

    parts = []
    current = ""

    for para in text.split("\n\n"):
        if len(current) + len(para) + 2 <= max_length:
            current += para + "\n\n"
            continue
        if current:
            parts.append(current.strip())
        if len(para) > max_length:
            # Oversized paragraph: fall back to splitting on words.
            current = ""
            for word in para.split():
                if len(current) + len(word) + 1 <= max_length:
                    current += word + " "
                else:
                    if current:
                        parts.append(current.strip())
                    current = word + " "
        else:
            current = para + "\n\n"

    if current.strip():
        parts.append(current.strip())

    return parts if parts else [text[:max_length]]


def format_time(value: Optional[datetime]) -> str:
    if value is None:
        return "unknown"
    return value.strftime("%Y-%m-%d %H:%M %Z").strip()


def format_stream(stream: Stream) -> str:
    """Format a single stream with its moderation state."""
    lines = [
        f"<b>{escape_html(stream.title)}</b>",
        f"{STATUS_LABELS[stream.status]} · {escape_html(stream.language_code)}",
    ]
    if stream.channel_name:
        lines.append(f"📺 {escape_html(stream.channel_name)}")
    lines.append(f"⏰ {format_time(stream.scheduled_start_time)}")

    duration = stream.duration()
    if duration:
        lines.append(f"⏱ {duration}")

    if stream.is_hidden():
        lines.append("🙈 hidden")
    elif not stream.is_approved():
        submitter = escape_html(stream.submitted_by_email or "unknown")
        lines.append(f"⏳ pending approval, submitted by {submitter}")

    lines.append(stream.url())
    lines.append(f"<code>{stream.youtube_id}</code>")
    return "\n".join(lines)


def format_stream_list(title: str, streams: list[Stream]) -> str:
    if not streams:
        return f"<b>{escape_html(title)}</b>\n\nNo streams."

    blocks = [f"<b>{escape_html(title)}</b>"]
    blocks.extend(format_stream(stream) for stream in streams)
    return "\n\n".join(blocks)


def format_channel_list(channels: list[Channel]) -> str:
    """Format channel list message with HTML."""
    if not channels:
        return "No channels registered."

    lines = ["<b>📺 Registered channels</b>\n"]
    for i, channel in enumerate(channels, 1):
        name = escape_html(channel.name)
        lines.append(f"{i}. {name}")
        lines.append(f"   <code>{channel.platform_id}</code>")
    return "\n".join(lines)


def format_help() -> str:
    return (
        "<b>🎬 Live stream moderation</b>\n\n"
        "/submit &lt;url or id&gt; [language] [email] - submit a stream for review\n"
        "/approve &lt;id&gt; - import and approve a stream\n"
        "/reject &lt;id&gt; - delete a pending submission\n"
        "/hide &lt;id&gt; - hide a published stream\n"
        "/pending - list submissions waiting for review\n"
        "/upcoming - list published live and upcoming streams\n"
        "/add_channel &lt;channel id&gt; - track a channel\n"
        "/remove_channel &lt;channel id&gt; - stop tracking a channel\n"
        "/channels - list tracked channels\n"
        "/poll - poll tracked channels now"
    )


def format_error(message: str) -> str:
    """Format error message."""
    return f"❌ {escape_html(message)}"


def format_success(message: str) -> str:
    """Format success message."""
    return f"✅ {escape_html(message)}"
