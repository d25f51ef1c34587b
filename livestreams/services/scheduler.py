import logging

from telegram.ext import Application, ContextTypes

from livestreams.config import Config
from livestreams.db.repositories import ChannelRepository
from livestreams.services.errors import YouTubeError
from livestreams.services.importer import (
    get_client,
    import_upcoming_streams,
    refresh_streams,
)

logger = logging.getLogger(__name__)

POLL_JOB_NAME = "channel_poll_job"


async def run_scheduled_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Poll registered channels for upcoming streams and refresh known ones."""
    logger.info("Starting scheduled poll")
    client = get_client()

    for channel in ChannelRepository.get_all():
        logger.info(f"Polling channel: {channel.name}")
        try:
            import_upcoming_streams(channel, client=client)
        except YouTubeError as e:
            logger.warning(f"Failed to poll {channel.name}: {e}")
            await context.bot.send_message(
                chat_id=Config.ADMIN_CHAT_ID,
                text=e.to_admin_message(),
                parse_mode="HTML",
            )

    try:
        refreshed = refresh_streams(client=client)
        logger.info(f"Refreshed {len(refreshed)} live/upcoming streams")
    except YouTubeError as e:
        logger.warning(f"Failed to refresh streams: {e}")
        await context.bot.send_message(
            chat_id=Config.ADMIN_CHAT_ID,
            text=e.to_admin_message(),
            parse_mode="HTML",
        )

    logger.info("Scheduled poll completed")


def setup_scheduler(application: Application) -> None:
    """Set up the repeating channel poll."""
    interval = Config.POLL_INTERVAL_MINUTES * 60
    application.job_queue.run_repeating(
        run_scheduled_job,
        interval=interval,
        first=10,
        name=POLL_JOB_NAME,
    )
    logger.info(f"Scheduler set up every {Config.POLL_INTERVAL_MINUTES} minutes")
