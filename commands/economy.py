"""
Economy commands: /work, /balance, /pay, /leaderboard, /roulette and friends.
"""

from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands, tasks

from config import TRANSFER_CONFIRM_TIMEOUT_SECONDS
from domain.services.roulette_wheel import BET_CATEGORY_LABELS, BET_TYPE_LABELS, BetType
from services import error_codes
from services.ledger_service import LedgerService, WorkState
from services.permissions import has_admin_permission
from services.roulette_service import RouletteService
from services.transfer_service import TransferQuote, TransferService
from utils.formatting import (
    format_bet_display,
    format_currency,
    format_duration,
    format_outcome,
    format_percent,
    format_rank,
    format_signed,
)
from utils.interaction_safety import safe_defer, safe_followup
from utils.rate_limiter import GLOBAL_RATE_LIMITER

logger = logging.getLogger("pod_bot.commands.economy")

QUOTE_PURGE_INTERVAL_MINUTES = 5

BET_CATEGORY_CHOICES = [app_commands.Choice(name=label, value=value) for value, label in BET_CATEGORY_LABELS.items()]


def _failure_message(result) -> str:
    """User-facing text for a failed service Result."""
    if result.error_code == error_codes.COOLDOWN_ACTIVE and "retry_after_seconds" in result.data:
        return f"⏳ Please wait {format_duration(result.data['retry_after_seconds'])} before sending another transfer."
    return f"❌ {result.error}"


class TransferConfirmView(discord.ui.View):
    """Confirm / Cancel buttons for a quoted transfer. Only the sender may press them."""

    def __init__(
        self,
        transfer_service: TransferService,
        quote: TransferQuote,
        recipient_mention: str,
        timeout: float = TRANSFER_CONFIRM_TIMEOUT_SECONDS,
    ):
        super().__init__(timeout=timeout)
        self.transfer_service = transfer_service
        self.quote = quote
        self.recipient_mention = recipient_mention
        self.message: discord.Message | None = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.quote.sender_id:
            await interaction.response.send_message(
                "Only the sender can confirm this transfer.", ephemeral=True
            )
            return False
        return True

    def _disable_all(self) -> None:
        for item in self.children:
            item.disabled = True

    @discord.ui.button(label="Confirm", style=discord.ButtonStyle.success, emoji="✅")
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button):
        self._disable_all()
        self.stop()

        try:
            result = self.transfer_service.confirm_transfer(self.quote.token)
        except Exception as exc:
            logger.error(f"Transfer confirm failed for {self.quote.sender_id}: {exc}", exc_info=True)
            await interaction.response.edit_message(
                content="❌ Failed to process transfer. Please try again.", embed=None, view=self
            )
            return

        if not result:
            await interaction.response.edit_message(content=_failure_message(result), embed=None, view=self)
            return

        record = result.value
        fee_text = f" (fee {format_currency(record.fee)} burned)" if record.fee else ""
        await interaction.response.edit_message(
            content=f"✅ Transfer complete. New balance: {format_currency(record.sender_balance_after)}",
            embed=None,
            view=self,
        )
        memo_text = f"\n> {record.memo}" if record.memo else ""
        await safe_followup(
            interaction,
            content=(
                f"💸 {interaction.user.mention} sent {format_currency(record.amount)} "
                f"to {self.recipient_mention}{fee_text}{memo_text}"
            ),
            ephemeral=False,
        )

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary, emoji="✖️")
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button):
        self._disable_all()
        self.stop()
        self.transfer_service.cancel_transfer(self.quote.token)
        await interaction.response.edit_message(content="Transfer cancelled. No funds moved.", embed=None, view=self)

    async def on_timeout(self):
        # Funds were never held, dropping the quote is enough
        if self.transfer_service.cancel_transfer(self.quote.token):
            logger.info(f"Transfer quote from {self.quote.sender_id} expired unconfirmed")
        self._disable_all()
        if self.message:
            try:
                await self.message.edit(content="⌛ Transfer confirmation expired. No funds moved.", embed=None, view=self)
            except discord.HTTPException as exc:
                logger.warning(f"Failed to update expired transfer message: {exc}")


class EconomyCommands(commands.Cog):
    """Slash commands for the currency economy and roulette."""

    def __init__(
        self,
        bot: commands.Bot,
        ledger_service: LedgerService,
        transfer_service: TransferService,
        roulette_service: RouletteService,
    ):
        self.bot = bot
        self.ledger_service = ledger_service
        self.transfer_service = transfer_service
        self.roulette_service = roulette_service

    async def cog_load(self):
        self.purge_expired_quotes.start()

    async def cog_unload(self):
        self.purge_expired_quotes.cancel()

    @tasks.loop(minutes=QUOTE_PURGE_INTERVAL_MINUTES)
    async def purge_expired_quotes(self):
        """Forget transfer quotes nobody confirmed."""
        try:
            dropped = self.transfer_service.purge_expired()
        except Exception as exc:
            logger.error(f"Failed to purge transfer quotes: {exc}", exc_info=True)
            return
        if dropped:
            logger.debug(f"Purged {dropped} expired transfer quote(s)")

    async def _check_rate_limit(
        self, interaction: discord.Interaction, scope: str, limit: int = 5, per_seconds: int = 10
    ) -> bool:
        """Return True if allowed; otherwise tell the user and return False."""
        rl = GLOBAL_RATE_LIMITER.check(
            scope=scope,
            guild_id=interaction.guild.id if interaction.guild else 0,
            user_id=interaction.user.id,
            limit=limit,
            per_seconds=per_seconds,
        )
        if not rl.allowed:
            await interaction.response.send_message(
                f"Please wait {rl.retry_after_seconds}s before using `/{scope}` again.",
                ephemeral=True,
            )
            return False
        return True

    # ------------------------------------------------------------------
    # /work
    # ------------------------------------------------------------------

    @app_commands.command(name="work", description="Work for some currency (30 minute cooldown)")
    async def work(self, interaction: discord.Interaction):
        if not await self._check_rate_limit(interaction, "work"):
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        try:
            result = self.ledger_service.do_work(interaction.user.id, interaction.user.display_name)
        except Exception as exc:
            logger.error(f"Work failed for {interaction.user.id}: {exc}", exc_info=True)
            await interaction.followup.send("Failed to process work. Please try again.", ephemeral=True)
            return

        if not result:
            available_at = result.data.get("available_at")
            when = f" (<t:{available_at}:t>)" if available_at else ""
            await interaction.followup.send(
                f"😴 You're tired. You can work again in "
                f"{format_duration(result.data.get('remaining_seconds', 0))}{when}.",
                ephemeral=True,
            )
            return

        outcome = result.value
        if outcome.was_bailout:
            message = (
                f"🆘 {interaction.user.mention} was broke and took an emergency shift: "
                f"+{format_currency(outcome.reward)}. Bailouts are one-time; transfers involving "
                f"you now carry a fee."
            )
        else:
            message = f"💼 {interaction.user.mention} worked hard and earned {format_currency(outcome.reward)}!"
        await interaction.followup.send(
            f"{message}\nBalance: {format_currency(outcome.new_balance)}",
            ephemeral=False,
        )

    # ------------------------------------------------------------------
    # /balance
    # ------------------------------------------------------------------

    @app_commands.command(name="balance", description="Check your balance (or someone else's)")
    @app_commands.describe(user="User to check (defaults to you)")
    async def balance(self, interaction: discord.Interaction, user: discord.Member | None = None):
        if not await self._check_rate_limit(interaction, "balance"):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        target = user or interaction.user
        try:
            account = self.ledger_service.get_or_create(target.id, target.display_name)
            rank = self.ledger_service.get_rank(target.id)
            status = self.ledger_service.can_work(target.id)
            usage = self.transfer_service.get_daily_usage(target.id)
        except Exception as exc:
            logger.error(f"Balance lookup failed for {target.id}: {exc}", exc_info=True)
            await interaction.followup.send("Failed to load balance. Please try again.", ephemeral=True)
            return

        embed = discord.Embed(
            title=f"💰 {target.display_name}",
            description=f"**{format_currency(account.balance)}**",
            color=discord.Color.gold(),
        )
        embed.add_field(name="Rank", value=format_rank(rank) if rank else "Unranked", inline=True)
        if not status.can_work:
            work_text = f"<t:{status.available_at}:R>"
        elif status.state == WorkState.BAILOUT_ELIGIBLE:
            work_text = "Ready (bailout available)"
        else:
            work_text = "Ready"
        embed.add_field(name="Work", value=work_text, inline=True)
        embed.add_field(
            name="Transfers today",
            value=(
                f"{usage['transfers_today']}/{self.transfer_service.max_daily_count} "
                f"({format_currency(usage['amount_today'])} sent)"
            ),
            inline=True,
        )
        if account.has_used_bailout:
            embed.set_footer(text="Bailout used: transfers carry a fee")

        await interaction.followup.send(embed=embed, ephemeral=True)

    # ------------------------------------------------------------------
    # /pay
    # ------------------------------------------------------------------

    @app_commands.command(name="pay", description="Send currency to another user")
    @app_commands.describe(
        recipient="User to pay",
        amount="Amount to send",
        memo="Optional note shown with the transfer",
    )
    async def pay(
        self,
        interaction: discord.Interaction,
        recipient: discord.Member,
        amount: int,
        memo: str | None = None,
    ):
        if not await self._check_rate_limit(interaction, "pay"):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        try:
            self.ledger_service.get_or_create(interaction.user.id, interaction.user.display_name)
            result = self.transfer_service.quote_transfer(
                sender_id=interaction.user.id,
                receiver_id=recipient.id,
                amount=amount,
                memo=memo,
                receiver_is_bot=recipient.bot,
            )
        except Exception as exc:
            logger.error(f"Transfer quote failed for {interaction.user.id}: {exc}", exc_info=True)
            await interaction.followup.send("Failed to prepare transfer. Please try again.", ephemeral=True)
            return

        if not result:
            await interaction.followup.send(_failure_message(result), ephemeral=True)
            return

        quote = result.value
        embed = discord.Embed(
            title="💸 Confirm Transfer",
            description=f"Send **{format_currency(quote.amount)}** to {recipient.mention}?",
            color=discord.Color.blurple(),
        )
        embed.add_field(name="Amount", value=format_currency(quote.amount), inline=True)
        embed.add_field(name="Fee", value=format_currency(quote.fee), inline=True)
        embed.add_field(name="Total", value=format_currency(quote.total_cost), inline=True)
        embed.add_field(
            name="Balance after",
            value=format_currency(quote.sender_balance - quote.total_cost),
            inline=True,
        )
        # Usage counts this transfer as if confirmed
        embed.add_field(
            name="Daily transfers used",
            value=f"{quote.transfers_today + 1}/{self.transfer_service.max_daily_count}",
            inline=True,
        )
        embed.add_field(
            name="Sent today",
            value=(
                f"{format_currency(quote.amount_today + quote.amount)} / "
                f"{format_currency(self.transfer_service.max_daily_amount)}"
            ),
            inline=True,
        )
        if quote.fee_applied:
            embed.add_field(
                name="Why a fee?",
                value="A bailout was used by one of you, so this transfer is taxed. The fee is burned.",
                inline=False,
            )
        if quote.memo:
            embed.add_field(name="Memo", value=quote.memo, inline=False)
        embed.set_footer(text=f"Expires in {format_duration(self.transfer_service.confirm_timeout_seconds)}")

        view = TransferConfirmView(
            self.transfer_service,
            quote,
            recipient.mention,
            timeout=self.transfer_service.confirm_timeout_seconds,
        )
        view.message = await interaction.followup.send(embed=embed, view=view, ephemeral=True, wait=True)

    # ------------------------------------------------------------------
    # /leaderboard
    # ------------------------------------------------------------------

    @app_commands.command(name="leaderboard", description="Richest users")
    async def leaderboard(self, interaction: discord.Interaction):
        if not await self._check_rate_limit(interaction, "leaderboard"):
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        try:
            entries = self.ledger_service.get_leaderboard()
            own_rank = self.ledger_service.get_rank(interaction.user.id)
        except Exception as exc:
            logger.error(f"Leaderboard failed: {exc}", exc_info=True)
            await interaction.followup.send("Failed to load leaderboard. Please try again.", ephemeral=True)
            return

        if not entries:
            await interaction.followup.send("Nobody has any money yet. Try `/work`!", ephemeral=False)
            return

        lines = [
            f"{format_rank(e.rank)} {e.display_name or f'<@{e.account_id}>'}: {format_currency(e.balance)}"
            for e in entries
        ]
        embed = discord.Embed(
            title="🏆 Leaderboard",
            description="\n".join(lines),
            color=discord.Color.gold(),
        )
        if own_rank and own_rank > len(entries):
            embed.set_footer(text=f"Your rank: #{own_rank}")
        await interaction.followup.send(embed=embed, ephemeral=False)

    # ------------------------------------------------------------------
    # /roulette
    # ------------------------------------------------------------------

    @app_commands.command(name="roulette", description="Bet on the roulette wheel")
    @app_commands.describe(
        bet_type="What to bet on",
        amount="Bet amount (-1 to go all-in)",
        number="Pocket 0-36 for Single Number, or 1-3 for Dozen and Column",
    )
    @app_commands.choices(bet_type=BET_CATEGORY_CHOICES)
    async def roulette(
        self,
        interaction: discord.Interaction,
        bet_type: app_commands.Choice[str],
        amount: int,
        number: app_commands.Range[int, 0, 36] | None = None,
    ):
        if not await self._check_rate_limit(interaction, "roulette"):
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        try:
            result = self.roulette_service.place_bet(
                account_id=interaction.user.id,
                bet_type=bet_type.value,
                selector=number,
                amount=amount,
                display_name=interaction.user.display_name,
            )
        except Exception as exc:
            logger.error(f"Roulette failed for {interaction.user.id}: {exc}", exc_info=True)
            await interaction.followup.send("Failed to spin the wheel. Please try again.", ephemeral=True)
            return

        if not result:
            await interaction.followup.send(_failure_message(result), ephemeral=True)
            return

        wager_round = result.value
        bet_label = format_bet_display(BET_TYPE_LABELS[BetType(wager_round.bet_type)], wager_round.bet_selector)
        all_in = " (ALL-IN)" if wager_round.bet_amount == wager_round.balance_before else ""
        if wager_round.won:
            title = "🎉 Winner!"
            color = discord.Color.green()
        else:
            title = "💀 Lost"
            color = discord.Color.red()

        embed = discord.Embed(
            title=f"🎰 Roulette: {title}",
            description=(
                f"{interaction.user.mention} bet {format_currency(wager_round.bet_amount)}{all_in} "
                f"on **{bet_label}**\nThe ball lands on **{format_outcome(wager_round.outcome_number, wager_round.outcome_color)}**"
            ),
            color=color,
        )
        embed.add_field(name="Result", value=format_signed(wager_round.net_result), inline=True)
        embed.add_field(name="Balance", value=format_currency(wager_round.balance_after), inline=True)
        if wager_round.consolation_applied:
            embed.add_field(
                name="🍀 Consolation",
                value=(
                    f"{wager_round.losing_streak} losses in a row. "
                    f"The house slips you {format_currency(wager_round.consolation_amount)}."
                ),
                inline=False,
            )
        if all_in and not wager_round.won and wager_round.balance_after == 0:
            embed.set_footer(text="Broke again. Your one-time work bailout is available.")

        await interaction.followup.send(embed=embed, ephemeral=False)

    @app_commands.command(name="roulette-odds", description="Roulette payouts, odds and consolation table")
    async def roulette_odds(self, interaction: discord.Interaction):
        if not await self._check_rate_limit(interaction, "roulette-odds"):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        lines = [
            f"**{row['label']}**: {row['payout_ratio']}:1 ({format_percent(row['win_probability'] * 100)})"
            for row in self.roulette_service.get_odds_table()
        ]
        embed = discord.Embed(
            title="🎰 Roulette Odds",
            description="\n".join(lines),
            color=discord.Color.dark_green(),
        )
        embed.add_field(
            name="House edge",
            value=format_percent(self.roulette_service.get_house_edge() * 100, digits=2),
            inline=False,
        )
        consolation_lines = [
            f"{streak}+ losses: {format_currency(amount)}"
            for streak, amount in self.roulette_service.get_consolation_table()
        ]
        embed.add_field(
            name="🍀 Consolation (small bets only)",
            value="\n".join(consolation_lines) or "None",
            inline=False,
        )
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="gamblestats", description="Roulette statistics")
    @app_commands.describe(user="User to view (defaults to you)")
    async def gamblestats(self, interaction: discord.Interaction, user: discord.Member | None = None):
        if not await self._check_rate_limit(interaction, "gamblestats"):
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        target = user or interaction.user
        try:
            today = self.roulette_service.get_daily_stats(target.id)
            overall = self.roulette_service.get_user_stats(target.id)
            streak = self.roulette_service.get_losing_streak(target.id)
        except Exception as exc:
            logger.error(f"Gamble stats failed for {target.id}: {exc}", exc_info=True)
            await interaction.followup.send("Failed to load stats. Please try again.", ephemeral=True)
            return

        if not overall["games_played"]:
            await interaction.followup.send(f"{target.display_name} hasn't played roulette yet.", ephemeral=False)
            return

        def _block(stats: dict) -> str:
            return (
                f"Games: {stats['games_played']} ({stats['wins']}W / {stats['losses']}L, "
                f"{format_percent(stats['win_rate'])})\n"
                f"Wagered: {format_currency(stats['total_bet'])}\n"
                f"Net: {format_signed(stats['net_profit'])}"
            )

        embed = discord.Embed(title=f"📊 {target.display_name}'s Roulette Stats", color=discord.Color.blue())
        embed.add_field(name="Today", value=_block(today) if today["games_played"] else "No games today", inline=False)
        embed.add_field(name="All time", value=_block(overall), inline=False)
        if overall["consolation_total"]:
            embed.add_field(name="Consolation received", value=format_currency(overall["consolation_total"]), inline=True)
        embed.add_field(name="Current losing streak", value=str(streak), inline=True)
        await interaction.followup.send(embed=embed, ephemeral=False)

    @app_commands.command(name="casino-stats", description="Roulette statistics across all players")
    async def casino_stats(self, interaction: discord.Interaction):
        if not await self._check_rate_limit(interaction, "casino-stats"):
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        try:
            totals = self.roulette_service.get_global_stats()
            winners = self.roulette_service.get_top_winners(5)
            by_type = self.roulette_service.get_bet_type_stats()
        except Exception as exc:
            logger.error(f"Casino stats failed: {exc}", exc_info=True)
            await interaction.followup.send("Failed to load stats. Please try again.", ephemeral=True)
            return

        if not totals["games_played"]:
            await interaction.followup.send("Nobody has played roulette yet.", ephemeral=False)
            return

        embed = discord.Embed(title="🎰 Casino Stats", color=discord.Color.dark_green())
        embed.add_field(
            name="All players",
            value=(
                f"Players: {totals['total_players']}\n"
                f"Games: {totals['games_played']} ({format_percent(totals['win_rate'])} won)\n"
                f"Wagered: {format_currency(totals['total_bet'])}\n"
                # House profit is the players' loss
                f"House: {format_signed(-totals['net_profit'])}"
            ),
            inline=False,
        )
        if winners:
            embed.add_field(
                name="Top winners",
                value="\n".join(
                    f"{format_rank(i)} <@{row['account_id']}>: {format_signed(row['net_profit'])}"
                    for i, row in enumerate(winners, start=1)
                ),
                inline=False,
            )
        embed.add_field(
            name="Popular bets",
            value="\n".join(
                f"{BET_TYPE_LABELS[BetType(row['bet_type'])]}: {row['games_played']} "
                f"({format_percent(row['win_rate'])} won)"
                for row in by_type[:5]
            ),
            inline=False,
        )
        await interaction.followup.send(embed=embed, ephemeral=False)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    @app_commands.command(name="economy-reset", description="Admin: reset one account or the whole economy")
    @app_commands.describe(user="Account to reset (omit to reset everyone)")
    async def economy_reset(self, interaction: discord.Interaction, user: discord.Member | None = None):
        if not has_admin_permission(interaction):
            await interaction.response.send_message("❌ Admin only.", ephemeral=True)
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        try:
            if user:
                existed = self.ledger_service.reset_account(user.id)
                message = f"Reset {user.mention}." if existed else f"{user.mention} has no account."
            else:
                count = self.ledger_service.reset_all()
                message = f"Economy reset. {count} account(s) removed."
        except Exception as exc:
            logger.error(f"Economy reset failed: {exc}", exc_info=True)
            await interaction.followup.send("Reset failed. Check the logs.", ephemeral=True)
            return

        await interaction.followup.send(f"🧹 {message}", ephemeral=True)


async def setup(bot: commands.Bot):
    ledger_service = getattr(bot, "ledger_service", None)
    if ledger_service is None:
        raise RuntimeError("Ledger service not registered on bot.")
    transfer_service = getattr(bot, "transfer_service", None)
    if transfer_service is None:
        raise RuntimeError("Transfer service not registered on bot.")
    roulette_service = getattr(bot, "roulette_service", None)
    if roulette_service is None:
        raise RuntimeError("Roulette service not registered on bot.")

    await bot.add_cog(EconomyCommands(bot, ledger_service, transfer_service, roulette_service))
