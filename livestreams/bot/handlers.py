import logging

from telegram import Update
from telegram.ext import ContextTypes

from livestreams.bot.formatters import (
    format_channel_list,
    format_error,
    format_help,
    format_stream,
    format_stream_list,
    format_success,
    split_message,
)
from livestreams.bot.middleware import admin_only
from livestreams.db.repositories import ChannelRepository, StreamRepository
from livestreams.services.errors import YouTubeError
from livestreams.services.importer import import_video, register_channel
from livestreams.services.youtube import extract_video_id

logger = logging.getLogger(__name__)


async def reply_html(update: Update, text: str) -> None:
    for part in split_message(text):
        await update.message.reply_text(part, parse_mode="HTML")


@admin_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - show available commands."""
    await reply_html(update, format_help())


@admin_only
async def cmd_submit(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /submit <url or id> [language] [email]."""
    if not context.args:
        await reply_html(update, "Usage: /submit &lt;url or id&gt; [language] [email]")
        return

    youtube_id = extract_video_id(context.args[0])
    if not youtube_id:
        await reply_html(update, format_error("That does not look like a YouTube link or video id."))
        return

    if StreamRepository.get_by_youtube_id(youtube_id):
        await reply_html(update, format_error("This stream was already submitted."))
        return

    language_code = context.args[1] if len(context.args) > 1 else "en"
    email = context.args[2] if len(context.args) > 2 else None

    try:
        stream = import_video(youtube_id, language_code, submitted_by_email=email)
    except YouTubeError as e:
        await reply_html(update, e.to_admin_message())
        return

    await reply_html(update, format_success("Stream submitted for review.") + "\n\n" + format_stream(stream))


@admin_only
async def cmd_approve(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /approve <url or id> [language]. Imports the stream first when unknown."""
    if not context.args:
        await reply_html(update, "Usage: /approve &lt;url or id&gt; [language]")
        return

    youtube_id = extract_video_id(context.args[0])
    if not youtube_id:
        await reply_html(update, format_error("That does not look like a YouTube link or video id."))
        return

    stream = StreamRepository.approve(youtube_id)
    if stream is None:
        language_code = context.args[1] if len(context.args) > 1 else "en"
        try:
            stream = import_video(youtube_id, language_code, approved=True)
        except YouTubeError as e:
            await reply_html(update, e.to_admin_message())
            return

    logger.info(f"Stream {youtube_id} approved")
    await reply_html(update, format_success("Stream approved.") + "\n\n" + format_stream(stream))


@admin_only
async def cmd_reject(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reject <id>."""
    if not context.args:
        await reply_html(update, "Usage: /reject &lt;id&gt;")
        return

    youtube_id = extract_video_id(context.args[0]) or context.args[0]
    if StreamRepository.reject(youtube_id):
        logger.info(f"Stream {youtube_id} rejected")
        await reply_html(update, format_success(f"Submission {youtube_id} rejected."))
    else:
        await reply_html(update, format_error("No pending submission with that id."))


@admin_only
async def cmd_hide(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /hide <id>."""
    if not context.args:
        await reply_html(update, "Usage: /hide &lt;id&gt;")
        return

    youtube_id = extract_video_id(context.args[0]) or context.args[0]
    stream = StreamRepository.hide(youtube_id)
    if stream is None:
        await reply_html(update, format_error("Stream not found."))
        return

    await reply_html(update, format_success(f"Stream {youtube_id} hidden."))


@admin_only
async def cmd_pending(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await reply_html(update, format_stream_list("⏳ Pending submissions", StreamRepository.get_pending()))


@admin_only
async def cmd_upcoming(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await reply_html(update, format_stream_list("🗓 Live and upcoming", StreamRepository.get_upcoming()))


@admin_only
async def cmd_add_channel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add_channel <channel id>."""
    if not context.args:
        await reply_html(update, "Usage: /add_channel &lt;channel id&gt;")
        return

    try:
        channel = register_channel(context.args[0])
    except YouTubeError as e:
        await reply_html(update, e.to_admin_message())
        return

    await reply_html(update, format_success(f"Channel added: {channel.name}"))


@admin_only
async def cmd_remove_channel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /remove_channel <channel id>."""
    if not context.args:
        await reply_html(update, "Usage: /remove_channel &lt;channel id&gt;")
        return

    if ChannelRepository.delete(context.args[0]):
        await reply_html(update, format_success("Channel removed."))
    else:
        await reply_html(update, format_error("Channel not found."))


@admin_only
async def cmd_channels(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await reply_html(update, format_channel_list(ChannelRepository.get_all()))


@admin_only
async def cmd_poll(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /poll - run the scheduled poll immediately."""
    await update.message.reply_text("🔄 Polling channels...")
    from livestreams.services.scheduler import run_scheduled_job
    await run_scheduled_job(context)
    await reply_html(update, format_success("Poll completed."))
