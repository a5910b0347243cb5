"""Discord bot client setup."""

import discord
from discord.ext import commands


def create_bot() -> commands.Bot:
    """Create and configure Discord bot."""
    # Slash commands and buttons only; no privileged intents needed
    intents = discord.Intents.default()
    intents.guilds = True

    # command_prefix is required even if we only use slash commands
    bot = commands.Bot(
        command_prefix='!',
        intents=intents,
        activity=discord.Game(name="±AURA | /aura_start")
    )

    return bot
