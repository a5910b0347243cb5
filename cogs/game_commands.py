"""Game commands for the aura bot."""

import logging
from typing import Dict, Optional

import discord
from discord import app_commands
from discord.ext import commands

import config
from game.models import GameEvent, Option, OptionType, SessionStatus
from game.session import AuraSession
from game.session_manager import session_manager
from utils.embeds import (
    create_achievement_unlocked_embed,
    create_game_over_embed,
    create_scenario_embed,
    create_session_started_embed,
)
from utils.formatters import format_aura

logger = logging.getLogger(__name__)

BUTTON_STYLES = {
    OptionType.SAFE: discord.ButtonStyle.secondary,
    OptionType.RISK: discord.ButtonStyle.danger,
    OptionType.WILD: discord.ButtonStyle.primary,
}

TONE_ICONS = {
    'good': '✅',
    'bad': '❌',
    'neutral': '➖',
}


class OptionButton(discord.ui.Button):
    """One button per scenario option."""

    def __init__(self, player_id: str, option: Option, index: int):
        super().__init__(
            label=f"{index}. {option.type.value.upper()}",
            style=BUTTON_STYLES.get(option.type, discord.ButtonStyle.secondary)
        )
        self.player_id = player_id
        self.option = option

    async def callback(self, interaction: discord.Interaction):
        if str(interaction.user.id) != self.player_id:
            await interaction.response.send_message("❌ This isn't your run! Use `/aura_start`.", ephemeral=True)
            return

        # Acknowledge before resolving; listeners post to the channel while the choice runs
        await interaction.response.defer()

        session = session_manager.get_session(self.player_id)
        resolution = await session.choose(self.option.id) if session else None
        if resolution is None:
            await interaction.followup.send("⏳ Can't pick right now.", ephemeral=True)
            return

        self.view.disable_all()
        await interaction.edit_original_response(view=self.view)


class ScenarioView(discord.ui.View):
    def __init__(self, player_id: str, session: AuraSession):
        super().__init__(timeout=None)
        scenario = session.state.current_scenario
        for index, option in enumerate(scenario.options, 1):
            self.add_item(OptionButton(player_id, option, index))

    def disable_all(self):
        for item in self.children:
            item.disabled = True
        self.stop()


class GameCommands(commands.Cog):
    """Commands that drive a run."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.channels: Dict[str, discord.abc.Messageable] = {}
        self.listeners: Dict[str, object] = {}
        self.scenario_messages: Dict[str, tuple] = {}  # player_id -> (message, view)

    def _bind_channel(self, player_id: str, session: AuraSession, channel: discord.abc.Messageable):
        """Route a session's events to the channel the run was started in."""
        self.channels[player_id] = channel
        if player_id in self.listeners:
            return

        async def listener(event: GameEvent):
            await self._render_event(player_id, session, event)

        self.listeners[player_id] = listener
        session.add_listener(listener)

    async def _unbind_channel(self, player_id: str, session: AuraSession):
        """Stop routing a session's events; the next /aura_start binds again."""
        listener = self.listeners.pop(player_id, None)
        if listener is not None:
            session.remove_listener(listener)
        await self._retire_scenario_message(player_id)
        self.channels.pop(player_id, None)

    async def _retire_scenario_message(self, player_id: str):
        message, view = self.scenario_messages.pop(player_id, (None, None))
        if message is None or view.is_finished():
            return
        view.disable_all()
        try:
            await message.edit(view=view)
        except discord.HTTPException:
            logger.warning("Could not disable old scenario buttons for %s", player_id)

    async def _render_event(self, player_id: str, session: AuraSession, event: GameEvent):
        channel = self.channels.get(player_id)
        if channel is None:
            return

        if event.kind == 'scenario':
            await self._retire_scenario_message(player_id)
            countdown = session.countdown
            seconds = countdown.remaining / max(countdown.decay, 1) * countdown.interval
            view = ScenarioView(player_id, session)
            message = await channel.send(
                embed=create_scenario_embed(
                    event.payload['scenario'],
                    event.payload['number'],
                    session.state.aura,
                    session.state.streak,
                    seconds
                ),
                view=view
            )
            self.scenario_messages[player_id] = (message, view)
        elif event.kind == 'feedback':
            icon = TONE_ICONS.get(event.payload.get('tone'), '')
            await channel.send(f"{icon} **{event.message}** • Aura {format_aura(session.state.aura)}")
        elif event.kind == 'timeout':
            await self._retire_scenario_message(player_id)
        elif event.kind == 'achievement':
            await channel.send(embed=create_achievement_unlocked_embed(event.payload['achievement']))
        elif event.kind in ('powerup_activated', 'powerup_consumed', 'challenge_completed', 'challenge_reward'):
            await channel.send(f"⚡ {event.message}" if event.kind.startswith('powerup') else f"📅 {event.message}")
        elif event.kind == 'game_over':
            await self._retire_scenario_message(player_id)
            await channel.send(embed=create_game_over_embed(
                event.message,
                event.payload['won'],
                event.payload['aura'],
                event.payload['max_aura'],
                event.payload['best_run'],
                session.state.scenarios_played
            ))
        elif event.kind == 'menu':
            await self._retire_scenario_message(player_id)
        # 'shake', 'paused' and 'resumed' have no chat rendering

    async def _get_session(self, interaction: discord.Interaction) -> Optional[AuraSession]:
        session = session_manager.get_session(str(interaction.user.id))
        if session is None:
            await interaction.response.send_message("❌ You don't have a run! Use `/aura_start`.", ephemeral=True)
        return session

    @app_commands.command(name="aura_start", description="Start a new aura run")
    async def start(self, interaction: discord.Interaction):
        """Start (or restart) a run."""
        player_id = str(interaction.user.id)
        session = await session_manager.get_or_create_session(player_id)

        if session.status == SessionStatus.PLAYING:
            await interaction.response.send_message("❌ You already have a run going!", ephemeral=True)
            return

        self._bind_channel(player_id, session, interaction.channel)
        await interaction.response.send_message(
            embed=create_session_started_embed(interaction.user.display_name, session.store.powerups)
        )
        if not await session.start():
            await interaction.followup.send("❌ Couldn't start a run right now.", ephemeral=True)

    @app_commands.command(name="aura_pause", description="Pause your run")
    async def pause(self, interaction: discord.Interaction):
        session = await self._get_session(interaction)
        if not session:
            return
        if await session.pause():
            await interaction.response.send_message(
                f"⏸️ Paused. {session.state.time_left} left on the clock. `/aura_resume` to continue.",
                ephemeral=True
            )
        else:
            await interaction.response.send_message("❌ Nothing to pause.", ephemeral=True)

    @app_commands.command(name="aura_resume", description="Resume your paused run")
    async def resume(self, interaction: discord.Interaction):
        session = await self._get_session(interaction)
        if not session:
            return
        # A held advance posts the next scenario while resuming
        await interaction.response.defer(ephemeral=True)
        if await session.resume():
            await interaction.followup.send("▶️ Resumed!", ephemeral=True)
        else:
            await interaction.followup.send("❌ Your run isn't paused.", ephemeral=True)

    @app_commands.command(name="aura_powerup", description="Use a power-up")
    @app_commands.describe(powerup="Power-up to use")
    @app_commands.choices(powerup=[
        app_commands.Choice(name="Shield (block next loss)", value="shield"),
        app_commands.Choice(name="2X Multiplier (double next gain)", value="multiplier"),
        app_commands.Choice(name="Reroll (new scenario)", value="reroll")
    ])
    async def powerup(self, interaction: discord.Interaction, powerup: str):
        session = await self._get_session(interaction)
        if not session:
            return
        # Reroll posts a new scenario before use_powerup returns
        await interaction.response.defer(ephemeral=True)
        item = session.store.get_powerup(powerup)
        if await session.use_powerup(powerup):
            await interaction.followup.send(f"{item.icon} {item.name} used ({item.count} left).", ephemeral=True)
        elif item is not None and item.count <= 0:
            await interaction.followup.send(f"❌ You're out of {item.name}.", ephemeral=True)
        else:
            await interaction.followup.send("❌ Can't use a power-up right now.", ephemeral=True)

    @app_commands.command(name="aura_cashout", description="End your run and bank the result")
    async def cashout(self, interaction: discord.Interaction):
        session = await self._get_session(interaction)
        if not session:
            return
        await interaction.response.defer(ephemeral=True)
        if await session.end_run(config.CASH_OUT_REASON):
            await interaction.followup.send("💰 Cashed out!", ephemeral=True)
        else:
            await interaction.followup.send("❌ Can't cash out right now.", ephemeral=True)

    @app_commands.command(name="aura_menu", description="Quit your run and return to the menu")
    async def menu(self, interaction: discord.Interaction):
        session = await self._get_session(interaction)
        if not session:
            return
        await interaction.response.defer(ephemeral=True)
        await session.return_to_menu()
        await self._unbind_channel(session.player_id, session)
        await interaction.followup.send("🏠 Back at the menu. Your run was discarded.", ephemeral=True)


async def setup(bot: commands.Bot):
    """Load the cog."""
    await bot.add_cog(GameCommands(bot))
