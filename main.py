"""Main entry point for the Aura Bot."""

import asyncio
import logging
import os

from dotenv import load_dotenv

import config
from bot.client import create_bot
from bot.events import setup_events
from database.migrations import initialize_database
from game.session_manager import session_manager

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


async def main():
    """Main function to start the bot."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    await initialize_database()

    bot = create_bot()
    setup_events(bot)

    await bot.load_extension('cogs.game_commands')
    await bot.load_extension('cogs.stats_commands')

    token = os.getenv("DISCORD_TOKEN")
    if not token:
        logger.error("DISCORD_TOKEN not found in environment variables!")
        logger.error("Please create a .env file with your Discord bot token.")
        return

    logger.info("Starting bot...")
    try:
        async with bot:
            await bot.start(token)
    finally:
        for session in session_manager.get_all_sessions():
            await session_manager.remove_session(session.player_id)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user.")


if __name__ == "__main__":
    run()
