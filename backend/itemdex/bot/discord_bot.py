"""Discord front end for the item catalog."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import discord
from discord import app_commands
from discord.ext import commands

from itemdex.core.errors import CatalogError, TransportError
from itemdex.services.catalog_service import CatalogService, CatalogSummary, ItemDetail, ReplaceResult
from itemdex.services.item_search import Category
from itemdex.services.pagination import EMBED_COLOR, RenderedPage, is_indicator, is_search_control

logger = logging.getLogger(__name__)

VIEW_TIMEOUT = 300.0


def build_embed(rendered: RenderedPage) -> discord.Embed:
    payload = rendered.payload
    embed = discord.Embed(title=payload.title, description=payload.description, color=payload.color)
    for f in payload.fields:
        embed.add_field(name=f.name, value=f.value, inline=f.inline)
    return embed


def build_view(rendered: RenderedPage, timeout: Optional[float] = VIEW_TIMEOUT) -> Optional[discord.ui.View]:
    """Turn rendered controls into buttons.

    The view is only a container; presses are handled by the interaction
    listener so they keep working after the view times out or the process
    restarts.
    """
    if not rendered.controls:
        return None
    view = discord.ui.View(timeout=timeout)
    for control in rendered.controls:
        view.add_item(
            discord.ui.Button(
                style=discord.ButtonStyle.secondary,
                label=control.label,
                custom_id=control.custom_id,
                disabled=control.disabled,
            )
        )
    return view


def page_message(rendered: RenderedPage) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"embed": build_embed(rendered)}
    view = build_view(rendered)
    if view is not None:
        kwargs["view"] = view
    return kwargs


def find_indicator_label(message: Optional[discord.Message]) -> Optional[str]:
    if message is None:
        return None
    for row in message.components:
        for child in getattr(row, "children", []):
            custom_id = getattr(child, "custom_id", None)
            if custom_id and is_indicator(custom_id):
                return child.label
    return None


def item_embed(detail: ItemDetail) -> discord.Embed:
    embed = discord.Embed(title=f"Item Information: {detail.id}", description=detail.name, color=EMBED_COLOR)
    embed.add_field(name="Item ID", value=str(detail.id), inline=True)
    embed.add_field(name="Item Name", value=detail.name, inline=True)
    embed.add_field(name="Type", value=detail.type, inline=True)
    return embed


def summary_embed(summary: CatalogSummary) -> discord.Embed:
    samples = "\n".join(f"• `{item_id}`: {name}" for item_id, name in summary.samples)
    embed = discord.Embed(
        title="Items Database Information",
        description=f"The items.txt database for this server contains {summary.total} items.",
        color=EMBED_COLOR,
    )
    embed.add_field(name="Total Items", value=str(summary.total), inline=True)
    embed.add_field(name="Blocks", value=str(summary.block_count), inline=True)
    embed.add_field(name="Seeds", value=str(summary.seed_count), inline=True)
    embed.add_field(name="Sample Items", value=samples or "No items available", inline=False)
    return embed


def format_replace_result(result: ReplaceResult) -> str:
    if result.replaced:
        message = (
            f"✅ items.txt database updated with {result.item_count} items! "
            f"The old database ({result.previous_count} items) has been replaced."
        )
    else:
        message = f"✅ items.txt database added with {result.item_count} items!"
    for warning in result.warnings:
        message += f"\n⚠️ Note: {warning}"
    return message


async def _send_error(interaction: discord.Interaction, exc: CatalogError) -> None:
    text = f"⚠️ {exc.message}"
    if interaction.response.is_done():
        await interaction.followup.send(text, ephemeral=True)
    else:
        await interaction.response.send_message(text, ephemeral=True)


async def _require_guild(interaction: discord.Interaction) -> Optional[str]:
    if interaction.guild_id is None:
        await interaction.response.send_message("This command can only be used in a server.", ephemeral=True)
        return None
    return str(interaction.guild_id)


def build_bot(
    service: CatalogService,
    intents: Optional[discord.Intents] = None,
    application_id: Optional[int] = None,
) -> commands.Bot:
    intents = intents or discord.Intents.default()
    bot = commands.Bot(command_prefix="/", intents=intents, application_id=application_id)
    setattr(bot, "catalog_service", service)

    @bot.event
    async def on_ready() -> None:
        logger.info("Logged in as %s (ID: %s)", bot.user, getattr(bot.user, "id", None))
        try:
            synced = await bot.tree.sync()
            logger.info("Synced %d commands", len(synced))
        except Exception as exc:  # pragma: no cover - logging only
            logger.exception("Failed to sync commands: %s", exc)

    @app_commands.command(name="search", description="Search items by name with an optional type filter")
    @app_commands.describe(query="Search keyword", type="Filter by item type", page="Page number")
    @app_commands.choices(
        type=[
            app_commands.Choice(name="All", value=Category.ALL.value),
            app_commands.Choice(name="Block", value=Category.BLOCK.value),
            app_commands.Choice(name="Seed", value=Category.SEED.value),
        ]
    )
    async def search(
        interaction: discord.Interaction,
        query: str,
        type: Optional[app_commands.Choice[str]] = None,
        page: Optional[int] = None,
    ) -> None:
        tenant_id = await _require_guild(interaction)
        if tenant_id is None:
            return
        category = Category(type.value) if type is not None else Category.ALL
        try:
            rendered = service.on_search_requested(tenant_id, query, category, page or 1)
        except CatalogError as exc:
            await _send_error(interaction, exc)
            return
        await interaction.response.send_message(**page_message(rendered))

    @app_commands.command(name="item", description="Show information about an item by ID")
    @app_commands.describe(item_id="Item ID")
    async def item(interaction: discord.Interaction, item_id: int) -> None:
        tenant_id = await _require_guild(interaction)
        if tenant_id is None:
            return
        try:
            detail = service.on_item_requested(tenant_id, item_id)
        except CatalogError as exc:
            await _send_error(interaction, exc)
            return
        await interaction.response.send_message(embed=item_embed(detail))

    @app_commands.command(name="additems", description="Add or replace the items.txt database for this server")
    @app_commands.describe(file="The items.txt file to upload")
    async def additems(interaction: discord.Interaction, file: discord.Attachment) -> None:
        tenant_id = await _require_guild(interaction)
        if tenant_id is None:
            return
        await interaction.response.defer(thinking=True)
        try:
            service.check_upload(file.filename, file.size)
            try:
                content = await file.read()
            except discord.HTTPException as exc:
                raise TransportError(f"Failed to download file: {exc}") from exc
            result = await asyncio.to_thread(service.on_file_uploaded, tenant_id, file.filename, file.size, content)
        except CatalogError as exc:
            logger.warning("Rejected items upload for guild %s: %s", tenant_id, exc.message)
            await _send_error(interaction, exc)
            return
        await interaction.followup.send(format_replace_result(result))

    @app_commands.command(name="delitems", description="Delete the items.txt database for this server")
    async def delitems(interaction: discord.Interaction) -> None:
        tenant_id = await _require_guild(interaction)
        if tenant_id is None:
            return
        try:
            result = service.on_delete_requested(tenant_id, interaction.permissions.administrator)
        except CatalogError as exc:
            await _send_error(interaction, exc)
            return
        await interaction.response.send_message(
            f"✅ items.txt database removed from this server. {result.removed_count} items were deleted."
        )

    @app_commands.command(name="itemsinfo", description="Show information about this server's items.txt database")
    async def itemsinfo(interaction: discord.Interaction) -> None:
        tenant_id = await _require_guild(interaction)
        if tenant_id is None:
            return
        try:
            summary = service.on_info_requested(tenant_id)
        except CatalogError as exc:
            await _send_error(interaction, exc)
            return
        await interaction.response.send_message(embed=summary_embed(summary))

    @bot.listen("on_interaction")
    async def on_search_control(interaction: discord.Interaction) -> None:
        if interaction.type is not discord.InteractionType.component:
            return
        custom_id = (interaction.data or {}).get("custom_id", "")
        if not is_search_control(custom_id):
            return
        if is_indicator(custom_id) or interaction.guild_id is None:
            await interaction.response.defer()
            return

        label = find_indicator_label(interaction.message)
        try:
            rendered = service.on_control_activated(str(interaction.guild_id), custom_id, label)
        except CatalogError as exc:
            await _send_error(interaction, exc)
            return
        if rendered is None:
            await interaction.response.defer()
            return
        await interaction.response.edit_message(embed=build_embed(rendered), view=build_view(rendered))

    bot.tree.add_command(search)
    bot.tree.add_command(item)
    bot.tree.add_command(additems)
    bot.tree.add_command(delitems)
    bot.tree.add_command(itemsinfo)
    return bot


__all__ = ["build_bot", "build_embed", "build_view", "find_indicator_label", "format_replace_result"]
