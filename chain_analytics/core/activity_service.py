"""Activity recorder - feeds one incoming event through the store and both ledgers."""

import logging
from typing import Any, Dict, Optional, Union

from ..schemas import AnalyticsEventType, AnalyticsSession, ContractEvent, UIEvent
from .contract_service import ContractService
from .event_service import EventService
from .session_service import SessionService
from .user_service import UserService

logger = logging.getLogger(__name__)


class ActivityService:
    """Composes the public operations of the event store, session tracker and ledgers."""

    def __init__(
        self,
        events: EventService,
        sessions: SessionService,
        users: UserService,
        contracts: ContractService,
    ):
        self.events = events
        self.sessions = sessions
        self.users = users
        self.contracts = contracts

    async def open_session(
        self,
        wallet_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        referrer: Optional[str] = None,
        entry_page: Optional[str] = None,
        chain_id: Optional[int] = None,
    ) -> AnalyticsSession:
        """Start a session and count it on the wallet's ledger record."""
        session = await self.sessions.create_session(
            wallet_address=wallet_address,
            user_agent=user_agent,
            ip_address=ip_address,
            referrer=referrer,
            entry_page=entry_page,
            chain_id=chain_id,
        )
        if wallet_address:
            await self.users.get_or_create_user(wallet_address)
            await self.users.update_user_stats(wallet_address, new_session=True)
        return session

    async def record_contract_event(self, event: Union[ContractEvent, Dict[str, Any]]) -> str:
        """Store a contract event and fold it into the user and contract ledgers."""
        if not isinstance(event, ContractEvent):
            event = ContractEvent.model_validate(event)
        event_id = await self.events.store_contract_event(event)

        gas_used = event.gas_used or 0
        if event.wallet_address:
            await self.users.get_or_create_user(event.wallet_address)
            await self.users.update_user_stats(
                event.wallet_address,
                new_interaction=True,
                new_transaction=event.event_type == AnalyticsEventType.CONTRACT_INTERACTION,
                gas_spent=gas_used,
            )

        await self.contracts.get_or_create_contract_analytics(event.contract_address)
        await self.contracts.update_contract_analytics(
            event.contract_address,
            event.event_name,
            user_address=event.wallet_address,
            gas_used=gas_used,
        )
        logger.debug(f"Recorded {event.event_name} on {event.contract_address} as {event_id}")
        return event_id

    async def record_ui_event(self, event: Union[UIEvent, Dict[str, Any]]) -> str:
        """Store a UI event and update its session and the wallet's ledger record."""
        if not isinstance(event, UIEvent):
            event = UIEvent.model_validate(event)
        event_id = await self.events.store_ui_event(event)

        is_page_view = event.event_type == AnalyticsEventType.PAGE_VIEW
        if event.session_id:
            await self.sessions.update_session_stats(
                event.session_id,
                page_view=is_page_view,
                interaction=not is_page_view,
                current_page=event.url if is_page_view else None,
            )

        if event.wallet_address:
            await self.users.get_or_create_user(event.wallet_address)
            await self.users.update_user_stats(event.wallet_address, new_interaction=not is_page_view)
        return event_id
