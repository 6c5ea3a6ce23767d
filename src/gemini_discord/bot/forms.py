"""Leave requests and issue reports: slash commands, buttons and modals.

Independent of the AI chat pipeline. Submissions are posted as embeds into
the configured destination channels.
"""

import logging
from typing import Optional

import discord
from discord import app_commands

from ..config import Settings

logger = logging.getLogger(__name__)

# 10062 Unknown interaction (expired, or clicked across a restart)
# 40060 Interaction has already been acknowledged
IGNORABLE_INTERACTION_CODES = {10062, 40060}

GENERIC_ERROR_MESSAGE = "❌ 發生錯誤，請稍後再試"
NOT_FILLED = "（未填）"


def is_ignorable_interaction_error(error: BaseException) -> bool:
    return isinstance(error, discord.HTTPException) and error.code in IGNORABLE_INTERACTION_CODES


async def handle_interaction_error(interaction: discord.Interaction, error: BaseException) -> None:
    """Swallow expected interaction races; tell the user about anything else."""
    if isinstance(error, app_commands.CommandInvokeError):
        error = error.original

    if is_ignorable_interaction_error(error):
        logger.warning(f"Ignored interaction error: code={error.code}")
        return

    logger.error(f"Interaction error: {error}", exc_info=error)

    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(GENERIC_ERROR_MESSAGE, ephemeral=True)
        else:
            await interaction.edit_original_response(content=GENERIC_ERROR_MESSAGE)
    except discord.HTTPException as e:
        logger.warning(f"Could not report interaction error to user: {e}")


def build_leave_button_embed() -> discord.Embed:
    return discord.Embed(title="請假申請", description="按下按鈕後會跳出表單，填完送出即可。")


def build_report_button_embed() -> discord.Embed:
    return discord.Embed(title="問題回報", description="按下按鈕後會跳出表單，填完送出即可。")


def build_leave_embed(user: discord.abc.User, dates: str, reason: str, note: str) -> discord.Embed:
    embed = discord.Embed(title="📌 新的請假申請", timestamp=discord.utils.utcnow())
    embed.add_field(name="申請人", value=user.mention, inline=False)
    embed.add_field(name="時間", value=dates or NOT_FILLED, inline=False)
    embed.add_field(name="原因", value=reason or NOT_FILLED, inline=False)
    embed.add_field(name="備註", value=note.strip() or "（無）", inline=False)
    return embed


def build_report_embed(
    user: discord.abc.User, title: str, report_type: str, description: str
) -> discord.Embed:
    embed = discord.Embed(title="🛠️ 新的問題回報", timestamp=discord.utils.utcnow())
    embed.add_field(name="回報者", value=user.mention, inline=True)
    embed.add_field(name="類型", value=report_type or NOT_FILLED, inline=True)
    embed.add_field(name="標題", value=title or NOT_FILLED, inline=False)
    embed.add_field(name="詳細描述", value=description or NOT_FILLED, inline=False)
    return embed


async def resolve_text_channel(
    client: discord.Client, channel_id: str
) -> Optional[discord.abc.Messageable]:
    """Look up a destination channel; None when missing or not text-based."""
    try:
        cid = int(channel_id)
    except (TypeError, ValueError):
        return None

    channel = client.get_channel(cid)
    if channel is None:
        try:
            channel = await client.fetch_channel(cid)
        except discord.HTTPException as e:
            logger.warning(f"Could not fetch channel {cid}: {e}")
            return None

    if not isinstance(channel, discord.abc.Messageable):
        return None
    return channel


async def deliver_submission(
    interaction: discord.Interaction,
    channel_id: str,
    env_name: str,
    channel_label: str,
    embed: discord.Embed,
    success_message: str,
) -> None:
    """Post a deferred form submission into its destination channel."""
    if not channel_id:
        await interaction.edit_original_response(content=f"❌ 未設定 {env_name}（環境變數）")
        return

    channel = await resolve_text_channel(interaction.client, channel_id)
    if channel is None:
        await interaction.edit_original_response(
            content=f"❌ {channel_label}頻道不存在/不是文字頻道（{env_name} 可能錯）"
        )
        return

    await channel.send(embed=embed)
    await interaction.edit_original_response(content=success_message)


class LeaveModal(discord.ui.Modal, title="請假表單"):
    dates = discord.ui.TextInput(label="請假時間", style=discord.TextStyle.short, required=True)
    reason = discord.ui.TextInput(label="原因", style=discord.TextStyle.paragraph, required=True)
    note = discord.ui.TextInput(
        label="備註（可選）", style=discord.TextStyle.paragraph, required=False
    )

    def __init__(self, settings: Settings):
        super().__init__(custom_id="leave_modal")
        self.settings = settings

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        embed = build_leave_embed(
            interaction.user, self.dates.value or "", self.reason.value or "", self.note.value or ""
        )
        await deliver_submission(
            interaction,
            self.settings.leave_channel_id,
            "LEAVE_CHANNEL_ID",
            "請假",
            embed,
            "✅ 已送出請假申請",
        )
        logger.info(f"Leave request submitted by {interaction.user.id}")

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await handle_interaction_error(interaction, error)


class ReportModal(discord.ui.Modal, title="問題回報表單"):
    report_title = discord.ui.TextInput(
        label="標題", style=discord.TextStyle.short, required=True, max_length=60
    )
    report_type = discord.ui.TextInput(
        label="類型（問題 / 建議 / 其他）", style=discord.TextStyle.short, required=True, max_length=30
    )
    description = discord.ui.TextInput(
        label="詳細描述", style=discord.TextStyle.paragraph, required=True, max_length=1000
    )

    def __init__(self, settings: Settings):
        super().__init__(custom_id="report_modal")
        self.settings = settings

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        embed = build_report_embed(
            interaction.user,
            self.report_title.value or "",
            self.report_type.value or "",
            self.description.value or "",
        )
        await deliver_submission(
            interaction,
            self.settings.report_channel_id,
            "REPORT_CHANNEL_ID",
            "問題回報",
            embed,
            "✅ 已送出問題回報，感謝！",
        )
        logger.info(f"Issue report submitted by {interaction.user.id}")

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await handle_interaction_error(interaction, error)


class LeaveButtonView(discord.ui.View):
    """Persistent view; survives restarts because of the fixed custom_id."""

    def __init__(self, settings: Settings):
        super().__init__(timeout=None)
        self.settings = settings

    @discord.ui.button(
        label="📩 請假申請", style=discord.ButtonStyle.primary, custom_id="leave_button"
    )
    async def open_form(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(LeaveModal(self.settings))

    async def on_error(
        self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item
    ) -> None:
        await handle_interaction_error(interaction, error)


class ReportButtonView(discord.ui.View):
    def __init__(self, settings: Settings):
        super().__init__(timeout=None)
        self.settings = settings

    @discord.ui.button(
        label="🛠️ 問題回報", style=discord.ButtonStyle.danger, custom_id="report_button"
    )
    async def open_form(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(ReportModal(self.settings))

    async def on_error(
        self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item
    ) -> None:
        await handle_interaction_error(interaction, error)


def register_form_commands(
    tree: app_commands.CommandTree, settings: Settings, guild: Optional[discord.abc.Snowflake] = None
) -> None:
    """Add /setup_leave_button and /setup_report_button to the command tree."""

    @tree.command(
        name="setup_leave_button", description="在目前頻道發送「請假」按鈕", guild=guild
    )
    async def setup_leave_button(interaction: discord.Interaction) -> None:
        await interaction.response.send_message("✅ 已在此頻道建立請假按鈕", ephemeral=True)
        await interaction.channel.send(
            embed=build_leave_button_embed(), view=LeaveButtonView(settings)
        )

    @tree.command(
        name="setup_report_button", description="在目前頻道發送「問題回報」按鈕", guild=guild
    )
    async def setup_report_button(interaction: discord.Interaction) -> None:
        await interaction.response.send_message("✅ 已在此頻道建立問題回報按鈕", ephemeral=True)
        await interaction.channel.send(
            embed=build_report_button_embed(), view=ReportButtonView(settings)
        )

    tree.error(handle_interaction_error)
