"""Stats, achievements, daily challenges and share commands."""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from game.models import SessionStatus
from game.session_manager import session_manager
from utils.embeds import (
    create_achievements_embed,
    create_daily_challenges_embed,
    create_stats_embed,
)
from utils.formatters import format_share_text

logger = logging.getLogger(__name__)


class StatsCommands(commands.Cog):
    """Stats and progress commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="aura_stats", description="View your aura statistics")
    async def stats(self, interaction: discord.Interaction):
        """View cumulative statistics."""
        session = await session_manager.get_or_create_session(str(interaction.user.id))

        # The stats screen only opens from the menu; mid-run it is a read-only peek
        opened = await session.show_stats()
        embed = create_stats_embed(
            interaction.user.display_name,
            session.store.stats,
            session.store.achievements
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)
        if opened:
            await session.hide_stats()

    @app_commands.command(name="aura_achievements", description="View your achievements")
    async def achievements(self, interaction: discord.Interaction):
        session = await session_manager.get_or_create_session(str(interaction.user.id))
        await interaction.response.send_message(
            embed=create_achievements_embed(session.store.achievements),
            ephemeral=True
        )

    @app_commands.command(name="aura_daily", description="View today's daily challenges")
    async def daily(self, interaction: discord.Interaction):
        session = await session_manager.get_or_create_session(str(interaction.user.id))
        await session.store.ensure_current_challenges()
        await interaction.response.send_message(
            embed=create_daily_challenges_embed(session.store.challenges),
            ephemeral=True
        )

    @app_commands.command(name="aura_share", description="Get a shareable summary of your stats")
    async def share(self, interaction: discord.Interaction):
        """DM the player a summary they can copy."""
        session = await session_manager.get_or_create_session(str(interaction.user.id))
        text = format_share_text(
            session.store.stats,
            session.store.achievements,
            session.store.challenges
        )

        try:
            await interaction.user.send(f"```\n{text}\n```")
        except discord.HTTPException:
            logger.warning("Could not DM share text to %s", interaction.user.id)
            await interaction.response.send_message("❌ COPY FAILED (are your DMs open?)", ephemeral=True)
            return

        await interaction.response.send_message("✅ STATS COPIED! Check your DMs.", ephemeral=True)

    @app_commands.command(name="aura_reset", description="Wipe your stats, achievements and power-ups")
    async def reset(self, interaction: discord.Interaction):
        session = await session_manager.get_or_create_session(str(interaction.user.id))
        if session.status == SessionStatus.PLAYING:
            await interaction.response.send_message("❌ Finish or quit your run first.", ephemeral=True)
            return

        await session.store.reset()
        await interaction.response.send_message("🧹 Progress wiped. Fresh start!", ephemeral=True)


async def setup(bot: commands.Bot):
    """Load the cog."""
    await bot.add_cog(StatsCommands(bot))
