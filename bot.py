"""
Discord entry point for the pod economy bot.

Run with: python bot.py (token from DISCORD_BOT_TOKEN or .env)
"""

import logging
import os

# Logging must be configured before discord is imported, or discord.py installs its own handler
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,
)
logger = logging.getLogger("pod_bot")


class _VoiceWarningFilter(logging.Filter):
    """Drop discord.py's PyNaCl notice; the bot never joins voice."""

    def filter(self, record):
        return "PyNaCl is not installed" not in record.getMessage()


logging.getLogger("discord.client").addFilter(_VoiceWarningFilter())

import discord
from discord.app_commands.errors import TransformerError
from discord.ext import commands

logging.getLogger("discord").handlers.clear()
logging.getLogger("discord").setLevel(logging.INFO)

from config import DB_PATH
from infrastructure.service_container import ServiceConfig, ServiceContainer

EXTENSIONS = ["commands.economy"]


class EconomyBot(commands.Bot):
    """Bot that owns the service container and loads the economy cog."""

    def __init__(self, service_config: ServiceConfig | None = None):
        intents = discord.Intents.default()
        intents.members = True
        super().__init__(command_prefix="!", intents=intents)
        self.container = ServiceContainer(service_config or ServiceConfig(db_path=DB_PATH))

    async def setup_hook(self) -> None:
        await self.container.initialize()
        self.container.expose_to_bot(self)

        loaded = 0
        for ext in EXTENSIONS:
            if ext in self.extensions:
                continue
            try:
                await self.load_extension(ext)
                loaded += 1
                logger.info(f"Loaded extension: {ext}")
            except Exception as exc:
                logger.error(f"Failed to load extension {ext}: {exc}", exc_info=True)

        logger.info(f"{loaded}/{len(EXTENSIONS)} extensions loaded, commands: {sorted(self.command_names())}")

    def command_names(self) -> set[str]:
        return {command.name for command in self.tree.walk_commands()}

    @property
    def storage_degraded(self) -> bool:
        selector = self.container.store_selector
        return bool(selector and selector.is_degraded)

    async def on_ready(self):
        logger.info(f"{self.user} connected to {len(self.guilds)} guild(s)")
        if self.storage_degraded:
            logger.warning("Serving from in-memory storage; balances will not survive a restart")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash command(s)")
        except discord.HTTPException as exc:
            logger.error(f"Failed to sync commands: {exc}", exc_info=True)


bot = EconomyBot()


@bot.tree.error
async def on_app_command_error(interaction: discord.Interaction, error: discord.app_commands.AppCommandError):
    """Answer every failed command so the user is never left on 'thinking...'."""
    command_name = interaction.command.name if interaction.command else "unknown"
    logger.error(f"App command /{command_name} failed: {error}", exc_info=error)

    if isinstance(error, TransformerError):
        # Usually a typed name instead of a picked member
        message = f"❌ Could not resolve `{getattr(error, 'value', None)}`. Pick the user from the list."
    else:
        message = "❌ Something went wrong. Please try again."

    try:
        if interaction.response.is_done():
            await interaction.followup.send(content=message, ephemeral=True)
        else:
            await interaction.response.send_message(content=message, ephemeral=True)
    except discord.HTTPException as exc:
        logger.error(f"Could not report command error to the user: {exc}")


def main():
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        from dotenv import load_dotenv

        load_dotenv()
        token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.error("DISCORD_BOT_TOKEN is not set")
        return

    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")


if __name__ == "__main__":
    main()
