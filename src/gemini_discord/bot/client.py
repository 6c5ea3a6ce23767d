"""Discord client: routes channel mentions into the answer pipeline."""

import logging
import re
from typing import Optional

import discord
from aiohttp import web
from discord import app_commands

from ..config import Settings
from ..core.orchestrator import ConversationOrchestrator
from ..core.postprocess import truncate_reply
from ..models.base import IncomingMessage
from .forms import LeaveButtonView, ReportButtonView, register_form_commands
from .health import start_health_server

logger = logging.getLogger(__name__)


def strip_bot_mention(content: str, bot_id: int) -> str:
    """Remove <@id> and <@!id> mentions of the bot and trim whitespace."""
    if not content:
        return ""
    return re.sub(rf"<@!?{bot_id}>", "", content).strip()


async def send_reply(message: discord.Message, text: str) -> bool:
    """Reply to the message, falling back to a plain channel send."""
    content = truncate_reply(text)
    try:
        await message.reply(content)
        return True
    except discord.HTTPException as e:
        logger.warning(f"Reply failed ({e}), falling back to channel send")

    try:
        await message.channel.send(content)
        return True
    except discord.HTTPException as e:
        logger.error(f"Channel send failed: {e}")
        return False


class AnswerBot(discord.Client):
    """Answers @mentions in the AI channel and hosts the leave/report forms."""

    def __init__(
        self,
        settings: Settings,
        orchestrator: Optional[ConversationOrchestrator] = None,
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.settings = settings
        self.orchestrator = orchestrator or ConversationOrchestrator.from_settings(settings)
        self.tree = app_commands.CommandTree(self)
        self._health_runner: Optional[web.AppRunner] = None

    async def setup_hook(self) -> None:
        try:
            self._health_runner = await start_health_server(self.settings.port)
        except OSError as e:
            logger.warning(f"Health server did not start: {e}")

        self.add_view(LeaveButtonView(self.settings))
        self.add_view(ReportButtonView(self.settings))

        guild = self.command_guild()
        register_form_commands(self.tree, self.settings, guild=guild)
        try:
            synced = await self.tree.sync(guild=guild)
            logger.info(f"Slash commands registered ({len(synced)})")
        except discord.HTTPException as e:
            logger.error(f"Slash command registration failed: {e}")

    def command_guild(self) -> Optional[discord.Object]:
        """Guild for slash command sync; None means a global sync."""
        if not self.settings.guild_id:
            return None
        try:
            return discord.Object(id=int(self.settings.guild_id))
        except ValueError:
            logger.warning(f"GUILD_ID {self.settings.guild_id!r} is not an id, syncing commands globally")
            return None

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user} (id: {self.user.id})")
        if self.settings.ai_channel_id:
            logger.info(f"Answering mentions in channel {self.settings.ai_channel_id}")

    def is_addressed(self, message: discord.Message) -> bool:
        """AI channel only, @mention only, never other bots."""
        if self.user is None or message.author.bot:
            return False
        if not self.settings.ai_channel_id:
            return False
        if str(message.channel.id) != self.settings.ai_channel_id:
            return False
        return any(u.id == self.user.id for u in message.mentions)

    async def on_message(self, message: discord.Message) -> None:
        if not self.is_addressed(message):
            return

        try:
            incoming = IncomingMessage(
                user_id=str(message.author.id),
                author_name=message.author.name or "使用者",
                text=strip_bot_mention(message.content, self.user.id),
            )

            try:
                await message.channel.typing()
            except discord.HTTPException as e:
                logger.debug(f"Typing indicator failed: {e}")

            reply = await self.orchestrator.handle(incoming)
            if reply is None:
                return
            await send_reply(message, reply.text)
        except Exception as e:
            logger.error(f"AI message handler error: {e}", exc_info=True)

    async def close(self) -> None:
        if self._health_runner is not None:
            await self._health_runner.cleanup()
            self._health_runner = None
        await self.orchestrator.aclose()
        await super().close()
