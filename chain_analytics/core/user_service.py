"""User Ledger - per-wallet rollups."""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..schemas import AnalyticsUser
from ..storage.base import StorageBackend
from ..utils import HOUR_MS, GasValue, now_ms, to_gas_int
from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class UserService:
    """Keeps one monotonic rollup record per wallet address."""

    def __init__(
        self,
        backend: StorageBackend,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.backend = backend
        self.settings = settings or get_settings()
        self.clock = clock

    def _window_start(self) -> int:
        return self.clock() - self.settings.ACTIVE_WINDOW_HOURS * HOUR_MS

    async def get_or_create_user(self, wallet_address: str, metadata: Optional[Dict[str, Any]] = None) -> AnalyticsUser:
        """Existing record for the wallet, or a new one with zeroed counters."""
        return self.backend.get_or_create_user(wallet_address, self.clock(), metadata)

    async def update_user_stats(
        self,
        wallet_address: str,
        new_session: bool = False,
        new_interaction: bool = False,
        new_transaction: bool = False,
        gas_spent: GasValue = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AnalyticsUser]:
        """
        Fold activity into the wallet's record. Returns None for wallets that
        were never created; this never creates one.
        """
        user = self.backend.update_user_stats(
            wallet_address,
            self.clock(),
            new_session,
            new_interaction,
            new_transaction,
            to_gas_int(gas_spent),
            metadata,
        )
        if user is None:
            logger.debug(f"Skipped stats update for unknown wallet {wallet_address}")
        return user

    async def get_user_by_wallet_address(self, wallet_address: str) -> Optional[AnalyticsUser]:
        return self.backend.get_user(wallet_address)

    async def get_all_users(self) -> List[AnalyticsUser]:
        return self.backend.list_users()

    async def get_active_users(self) -> List[AnalyticsUser]:
        """Users seen within the active window (24h by default)."""
        return self.backend.users_seen_since(self._window_start())

    async def get_new_users(self) -> List[AnalyticsUser]:
        """Users first seen within the active window, newest first."""
        return self.backend.users_first_seen_since(self._window_start())

    async def count_new_users(self, start: int, end: int) -> int:
        return self.backend.count_new_users(start, end)
