"""Communication manager: status snapshots from email/chat connectors."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..domain.models import CommunicationActivity, utcnow
from ..domain.protocols import CommunicationConnector

logger = logging.getLogger(__name__)

KNOWN_SERVICES = ("gmail", "discord", "messenger")


class CommunicationManager:
    """Tracks which services are enabled and collects their activity.

    A service is enabled by its credentials being present. Talking to the
    provider is left to an injected connector; an enabled service without
    one reports an empty snapshot.
    """

    def __init__(
        self,
        *,
        gmail_enabled: bool = False,
        discord_enabled: bool = False,
        connectors: Optional[Sequence[CommunicationConnector]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._enabled = {
            "gmail": gmail_enabled,
            "discord": discord_enabled,
            "messenger": False,
        }
        self._connectors = {c.service: c for c in connectors or ()}
        self._clock = clock
        self._lock = asyncio.Lock()

        if not gmail_enabled:
            logger.info("Gmail credentials not found. Gmail integration disabled.")
        if not discord_enabled:
            logger.info("Discord bot token not found. Discord integration disabled.")

    def is_service_enabled(self, service: str) -> bool:
        return self._enabled.get(service, False)

    @property
    def enabled_services(self) -> list[str]:
        return [s for s in KNOWN_SERVICES if self._enabled[s]]

    async def _fetch(self, service: str) -> CommunicationActivity:
        connector = self._connectors.get(service)
        if connector is None:
            return CommunicationActivity(service=service, last_activity=self._clock())
        return await connector.fetch_activity()

    async def sync_all(self) -> list[CommunicationActivity]:
        """Snapshot every enabled service; failing services are skipped."""
        activities = []
        async with self._lock:
            for service in self.enabled_services:
                logger.info(f"Syncing {service}...")
                try:
                    activities.append(await self._fetch(service))
                except Exception as e:
                    logger.error(f"{service} sync failed: {e}")
        return activities

    async def get_status(self) -> list[CommunicationActivity]:
        """One snapshot per known service, zeros for disabled ones."""
        synced = {a.service: a for a in await self.sync_all()}
        return [
            synced.get(service, CommunicationActivity(service=service))
            for service in KNOWN_SERVICES
        ]

    async def connect_service(self, service: str) -> str:
        """Status text for a connection request.

        Raises:
            ValueError: If the service is unknown
        """
        if service == "gmail":
            if self._enabled["gmail"]:
                logger.info("Gmail connection requested")
                return "Gmail OAuth flow would be initiated here. Please check your browser."
            return (
                "Gmail credentials not configured. Please add GMAIL_CLIENT_ID "
                "and GMAIL_CLIENT_SECRET to your environment."
            )
        if service == "discord":
            if self._enabled["discord"]:
                logger.info("Discord connection requested")
                return "Discord bot connection initiated."
            return (
                "Discord bot token not configured. Please add DISCORD_BOT_TOKEN "
                "to your environment."
            )
        if service == "messenger":
            logger.info("Messenger connection requested")
            return "Messenger integration coming soon!"

        logger.error(f"Unknown service requested: {service}")
        raise ValueError(f"Unknown service: {service}")
