import logging
import sys

from telegram.ext import Application, CommandHandler

from livestreams.bot.handlers import (
    cmd_add_channel,
    cmd_approve,
    cmd_channels,
    cmd_hide,
    cmd_pending,
    cmd_poll,
    cmd_reject,
    cmd_remove_channel,
    cmd_start,
    cmd_submit,
    cmd_upcoming,
)
from livestreams.config import Config
from livestreams.db.database import init_db
from livestreams.services.scheduler import setup_scheduler

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

COMMANDS = {
    "start": cmd_start,
    "help": cmd_start,
    "submit": cmd_submit,
    "approve": cmd_approve,
    "reject": cmd_reject,
    "hide": cmd_hide,
    "pending": cmd_pending,
    "upcoming": cmd_upcoming,
    "add_channel": cmd_add_channel,
    "remove_channel": cmd_remove_channel,
    "channels": cmd_channels,
    "poll": cmd_poll,
}


def main() -> None:
    """Run the moderation bot."""
    errors = Config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        sys.exit(1)

    init_db()
    logger.info("Database initialized")

    application = Application.builder().token(Config.TELEGRAM_BOT_TOKEN).build()

    for command, handler in COMMANDS.items():
        application.add_handler(CommandHandler(command, handler))

    setup_scheduler(application)

    logger.info("Bot starting...")
    application.run_polling()


if __name__ == "__main__":
    main()
