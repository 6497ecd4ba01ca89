"""
Helpers that keep slash commands from failing on expired or already-answered interactions.

Discord gives an interaction three seconds for its first response. Commands
defer as early as possible, then answer through the followup webhook.
"""

import logging

import discord

logger = logging.getLogger("pod_bot.utils.interaction_safety")


async def safe_defer(interaction: discord.Interaction, ephemeral: bool = False) -> bool:
    """
    Defer the interaction response if it has not been answered yet.

    Returns:
        True if the command may continue with followups, False if the
        interaction is gone (expired or unknown).
    """
    if interaction.response.is_done():
        return True
    try:
        await interaction.response.defer(ephemeral=ephemeral)
        return True
    except discord.NotFound:
        logger.warning(f"Interaction {interaction.id} expired before it could be deferred")
        return False
    except discord.HTTPException as exc:
        # 40060: already acknowledged by another handler
        if getattr(exc, "code", None) == 40060:
            return True
        logger.warning(f"Failed to defer interaction {interaction.id}: {exc}")
        return False


async def safe_followup(interaction: discord.Interaction, **kwargs):
    """
    Send a followup message after the interaction was deferred.

    Returns the sent message, or None if Discord rejected it.
    """
    try:
        return await interaction.followup.send(**kwargs)
    except discord.HTTPException as exc:
        logger.warning(f"Failed to send followup for interaction {interaction.id}: {exc}")
        return None
