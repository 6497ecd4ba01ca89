"""
Service container for dependency injection and initialization.

This module centralizes store and service creation and wiring so bot.py
only has to build the container and expose it.

Usage:
    container = ServiceContainer(config)
    await container.initialize()

    # Access services
    ledger_service = container.ledger_service
    roulette_service = container.roulette_service
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from services.ledger_service import LedgerService
    from services.recorder_service import GameRecorder
    from services.roulette_service import RouletteService
    from services.transfer_service import TransferService

import config as app_config
from repositories.errors import StorageUnavailableError
from repositories.history_store import PersistentHistoryStore
from repositories.ledger_store import PersistentLedgerStore
from services.store_selector import StoreSelector

logger = logging.getLogger("pod_bot.infrastructure.container")


@dataclass
class RepositoryContainer:
    """Container for the persistent stores (None if storage was unavailable)."""

    ledger: PersistentLedgerStore | None = None
    history: PersistentHistoryStore | None = None


@dataclass
class ServiceConfig:
    """Configuration for service initialization."""

    # Database
    db_path: str = app_config.DB_PATH
    allow_volatile_fallback: bool = app_config.ALLOW_VOLATILE_FALLBACK
    starting_balance: int = app_config.STARTING_BALANCE

    # Work settings
    work_cooldown_seconds: int = app_config.WORK_COOLDOWN_SECONDS
    work_reward_min: int = app_config.WORK_REWARD_MIN
    work_reward_max: int = app_config.WORK_REWARD_MAX

    # Transfer settings
    transfer_min_amount: int = app_config.TRANSFER_MIN_AMOUNT
    transfer_max_amount: int = app_config.TRANSFER_MAX_AMOUNT
    transfer_cooldown_seconds: int = app_config.TRANSFER_COOLDOWN_SECONDS
    transfer_max_daily_count: int = app_config.TRANSFER_MAX_DAILY_COUNT
    transfer_max_daily_amount: int = app_config.TRANSFER_MAX_DAILY_AMOUNT
    transfer_bailout_fee_rate: float = app_config.TRANSFER_BAILOUT_FEE_RATE
    transfer_confirm_timeout_seconds: int = app_config.TRANSFER_CONFIRM_TIMEOUT_SECONDS

    # Roulette settings
    roulette_min_bet: int = app_config.ROULETTE_MIN_BET
    roulette_max_bet: int = app_config.ROULETTE_MAX_BET


class ServiceContainer:
    """
    Central container for all application services.

    Handles initialization order and dependency injection. If the database
    cannot be opened the container still starts, with the store selector
    already running on volatile memory.

    Example:
        container = ServiceContainer(config)
        await container.initialize()

        # Services are now available
        transfer_service = container.transfer_service
    """

    def __init__(self, config: ServiceConfig | None = None):
        """
        Initialize the container with configuration.

        Args:
            config: Service configuration (uses defaults if None)
        """
        self.config = config or ServiceConfig()
        self._initialized = False
        self._repos = RepositoryContainer()
        self._store_selector: StoreSelector | None = None
        self._services: dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        """Check if container has been initialized."""
        return self._initialized

    async def initialize(self) -> None:
        """
        Initialize all services in correct order.

        This method is idempotent - calling it multiple times has no effect.
        """
        if self._initialized:
            logger.debug("ServiceContainer already initialized, skipping")
            return

        logger.info("Initializing ServiceContainer...")

        self._init_stores()
        self._init_services()

        self._initialized = True
        logger.info(
            "ServiceContainer initialization complete"
            f"{' (degraded: in-memory storage)' if self._store_selector.is_degraded else ''}"
        )

    def _init_stores(self) -> None:
        """Open the persistent stores and put the failover selector in front of them."""
        logger.debug(f"Initializing stores at {self.config.db_path}")

        try:
            self._repos.ledger = PersistentLedgerStore(
                self.config.db_path, starting_balance=self.config.starting_balance
            )
            self._repos.history = PersistentHistoryStore(self.config.db_path)
        except StorageUnavailableError as exc:
            if not self.config.allow_volatile_fallback:
                raise
            logger.error(f"Persistent storage unavailable at startup: {exc}")
            self._repos.ledger = None
            self._repos.history = None

        self._store_selector = StoreSelector(
            self._repos.ledger,
            self._repos.history,
            allow_fallback=self.config.allow_volatile_fallback,
            starting_balance=self.config.starting_balance,
        )

    def _init_services(self) -> None:
        """Initialize services in dependency order."""
        logger.debug("Initializing economy services")

        from services.ledger_service import LedgerService
        from services.recorder_service import GameRecorder
        from services.roulette_service import RouletteService
        from services.transfer_service import TransferService

        selector = self._store_selector

        self._services["recorder"] = GameRecorder(selector.history)

        self._services["ledger"] = LedgerService(
            ledger_store=selector.ledger,
            recorder=self._services["recorder"],
            cooldown_seconds=self.config.work_cooldown_seconds,
            reward_min=self.config.work_reward_min,
            reward_max=self.config.work_reward_max,
        )

        self._services["transfer"] = TransferService(
            ledger_service=self._services["ledger"],
            recorder=self._services["recorder"],
            min_amount=self.config.transfer_min_amount,
            max_amount=self.config.transfer_max_amount,
            cooldown_seconds=self.config.transfer_cooldown_seconds,
            max_daily_count=self.config.transfer_max_daily_count,
            max_daily_amount=self.config.transfer_max_daily_amount,
            bailout_fee_rate=self.config.transfer_bailout_fee_rate,
            confirm_timeout_seconds=self.config.transfer_confirm_timeout_seconds,
        )

        self._services["roulette"] = RouletteService(
            ledger_service=self._services["ledger"],
            recorder=self._services["recorder"],
            min_bet=self.config.roulette_min_bet,
            max_bet=self.config.roulette_max_bet,
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def ledger_store(self) -> PersistentLedgerStore | None:
        """Get the persistent ledger store (None if storage failed at startup)."""
        return self._repos.ledger

    @property
    def history_store(self) -> PersistentHistoryStore | None:
        """Get the persistent history store (None if storage failed at startup)."""
        return self._repos.history

    @property
    def store_selector(self) -> StoreSelector | None:
        return self._store_selector

    @property
    def recorder(self) -> "GameRecorder | None":
        """Get game recorder."""
        return self._services.get("recorder")

    @property
    def ledger_service(self) -> "LedgerService | None":
        """Get ledger service."""
        return self._services.get("ledger")

    @property
    def transfer_service(self) -> "TransferService | None":
        """Get transfer service."""
        return self._services.get("transfer")

    @property
    def roulette_service(self) -> "RouletteService | None":
        """Get roulette service."""
        return self._services.get("roulette")

    def expose_to_bot(self, bot) -> None:
        """
        Expose all services to a Discord bot object.

        Cogs look services up via bot.<service_name> in their setup().

        Args:
            bot: The Discord bot instance
        """
        bot.store_selector = self.store_selector
        bot.recorder = self.recorder
        bot.ledger_service = self.ledger_service
        bot.transfer_service = self.transfer_service
        bot.roulette_service = self.roulette_service

        logger.info("Services exposed to bot object")
