"""Contract Ledger - per-contract rollups."""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..schemas import ContractAnalytics
from ..storage.base import StorageBackend
from ..utils import GasValue, now_ms, to_gas_int

logger = logging.getLogger(__name__)


class ContractService:
    """Keeps interaction, unique-user, gas and per-event tallies per contract address."""

    def __init__(self, backend: StorageBackend, clock: Callable[[], int] = now_ms):
        self.backend = backend
        self.clock = clock

    async def get_or_create_contract_analytics(
        self,
        address: str,
        name: Optional[str] = None,
        type: Optional[str] = None,
        deployed_at: Optional[int] = None,
        deployer_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContractAnalytics:
        return self.backend.get_or_create_contract(
            address,
            self.clock(),
            name=name,
            type=type,
            deployed_at=deployed_at,
            deployer_address=deployer_address,
            metadata=metadata,
        )

    async def update_contract_analytics(
        self,
        address: str,
        event_name: str,
        user_address: Optional[str] = None,
        gas_used: GasValue = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[ContractAnalytics]:
        """
        Record one interaction with the contract.

        ``unique_users`` grows only the first time ``user_address`` is observed
        on this contract. Returns None when the contract was never created.
        """
        contract = self.backend.update_contract(
            address,
            event_name,
            self.clock(),
            user_address,
            to_gas_int(gas_used),
            metadata,
        )
        if contract is None:
            logger.debug(f"Skipped interaction for unknown contract {address}")
        return contract

    async def get_contract_analytics(self, address: str) -> Optional[ContractAnalytics]:
        return self.backend.get_contract(address)

    async def get_all_contract_analytics(self) -> List[ContractAnalytics]:
        """All contracts, most interactions first."""
        return self.backend.list_contracts()

    async def get_top_contracts_by_interactions(self, limit: int = 10) -> List[ContractAnalytics]:
        return self.backend.list_contracts(limit)
