"""
Permission checks for administrative economy commands.
"""

import discord

from config import ADMIN_USER_IDS


def has_allowlisted_admin(interaction: discord.Interaction) -> bool:
    """
    Check if the user is explicitly allowlisted via ADMIN_USER_IDS.
    An empty ADMIN_USER_IDS allowlists nobody.
    """
    return interaction.user.id in ADMIN_USER_IDS


def _guild_permissions(interaction: discord.Interaction):
    # Prefer the guild member; fall back to a Member-like interaction.user
    guild = getattr(interaction, "guild", None)
    if guild:
        get_member = getattr(guild, "get_member", None)
        if callable(get_member):
            member = get_member(interaction.user.id)
            perms = getattr(member, "guild_permissions", None) if member else None
            if perms:
                return perms
    return getattr(interaction.user, "guild_permissions", None)


def has_admin_permission(interaction: discord.Interaction) -> bool:
    """
    Check if the user may run economy administration (resets).

    Allowlisted users always pass; otherwise the user needs Administrator
    or Manage Server in the guild.
    """
    if ADMIN_USER_IDS and has_allowlisted_admin(interaction):
        return True

    perms = _guild_permissions(interaction)
    if not perms:
        return False
    return bool(getattr(perms, "administrator", False) or getattr(perms, "manage_guild", False))
