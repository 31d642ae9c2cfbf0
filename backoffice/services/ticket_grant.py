"""Credits earned tickets to the buyer's user profile."""
from __future__ import annotations

from backoffice.core.constants import EntityType, SyncOperation
from backoffice.core.utils import datetime_to_json, get_field, utcnow
from backoffice.domain.entities import Order, RemoteRecord
from backoffice.repositories import RecordRepository
from backoffice.services.sync_queue import ReconciliationQueue
from logging_config import logger


class TicketGrantService:
    """Adds tickets to the ``user_profiles`` row matching the order's email.

    Used as the ``grant_tickets`` callback of the validate-and-distribute use
    case. The profile is updated locally and the new balance is upserted.
    """

    def __init__(self, profiles: RecordRepository, queue: ReconciliationQueue):
        self.profiles = profiles
        self.queue = queue

    def find_profile(self, email: str) -> RemoteRecord | None:
        wanted = (email or "").strip().lower()
        if not wanted:
            return None
        for profile in self.profiles.list_all():
            if str(get_field(profile, "email", "")).strip().lower() == wanted:
                return profile
        return None

    async def grant(self, order: Order, tickets: int) -> bool:
        profile = self.find_profile(order.customer_info.email)
        if profile is None:
            logger.warning(f"No user profile for {order.customer_info.email or 'unknown email'}, order {order.id}")
            return False

        profile.tickets = int(get_field(profile, "tickets", 0) or 0) + tickets
        profile.updated_at = datetime_to_json(utcnow())
        self.queue.enqueue(
            EntityType.USER_PROFILES,
            SyncOperation.UPSERT,
            profile.id,
            {"tickets": profile.tickets, "updated_at": profile.updated_at},
        )
        logger.info(f"Granted {tickets} tickets to profile {profile.id} for order {order.id}")
        return True
