"""Dependency injection container."""

import logging
from dataclasses import dataclass, field
from typing import TypeVar, Generic, Callable, Optional, Any

from taskpulse.ai.engine import InsightEngine
from taskpulse.communication.manager import CommunicationManager
from taskpulse.domain.protocols import TaskStore, NotificationSender
from taskpulse.events import EventBus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Provider(Generic[T]):
    """Lazy provider that creates instance on first access."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._instance: Optional[T] = None

    def get(self) -> T:
        """Get the instance, creating it if necessary."""
        if self._instance is None:
            self._instance = self._factory()
        return self._instance

    def reset(self) -> None:
        """Reset the instance (for testing)."""
        self._instance = None

    def override(self, instance: T) -> None:
        """Override with a specific instance (for testing)."""
        self._instance = instance


@dataclass
class Container:
    """Dependency injection container.

    Each shared component is a single lazily-built instance holding its own
    lock, so components never contend on a common lock.
    """

    _store: Optional[Provider[TaskStore]] = None
    _engine: Optional[Provider[InsightEngine]] = None
    _communication: Optional[Provider[CommunicationManager]] = None
    _events: Provider[EventBus] = field(default_factory=lambda: Provider(EventBus))

    # Notification senders
    _notification_senders: list[Provider[NotificationSender]] = field(
        default_factory=list
    )
    _notification_service: Optional[Provider[Any]] = None
    notifications_enabled: bool = True

    # Settings cache
    _settings: Optional[Any] = None

    @property
    def store(self) -> TaskStore:
        """Get the task store."""
        if self._store is None:
            raise RuntimeError("Task store not configured")
        return self._store.get()

    @property
    def engine(self) -> InsightEngine:
        """Get the insight engine (fallback-only unless configured)."""
        if self._engine is None:
            self._engine = Provider(InsightEngine)
        return self._engine.get()

    @property
    def communication(self) -> CommunicationManager:
        """Get the communication manager."""
        if self._communication is None:
            self._communication = Provider(CommunicationManager)
        return self._communication.get()

    @property
    def events(self) -> EventBus:
        return self._events.get()

    @property
    def notification_senders(self) -> list[NotificationSender]:
        """Get all notification senders."""
        return [p.get() for p in self._notification_senders]

    @property
    def task_service(self) -> Any:
        """Get TaskService instance."""
        from taskpulse.services.task_service import TaskService

        return TaskService(store=self.store)

    @property
    def notification_service(self) -> Any:
        """Get the shared NotificationService instance."""
        if self._notification_service is None:
            from taskpulse.services.notification_service import NotificationService

            self._notification_service = Provider(
                lambda: NotificationService(
                    store=self.store,
                    senders=self.notification_senders,
                    events=self.events,
                    enabled=self.notifications_enabled,
                )
            )
        return self._notification_service.get()

    @property
    def coach_service(self) -> Any:
        """Get CoachService instance."""
        from taskpulse.services.coach_service import CoachService

        return CoachService(
            store=self.store,
            engine=self.engine,
            notifications=self.notification_service,
            communication=self.communication,
            events=self.events,
        )

    @property
    def settings(self) -> Any:
        """Get application settings."""
        if self._settings is None:
            from taskpulse.config.settings import get_settings

            self._settings = get_settings()
        return self._settings

    @property
    def is_configured(self) -> bool:
        return self._store is not None

    def configure_store(self, factory: Callable[[], TaskStore]) -> "Container":
        """Configure the task store."""
        self._store = Provider(factory)
        return self

    def configure_engine(self, factory: Callable[[], InsightEngine]) -> "Container":
        """Configure the insight engine."""
        self._engine = Provider(factory)
        return self

    def configure_communication(
        self, factory: Callable[[], CommunicationManager]
    ) -> "Container":
        """Configure the communication manager."""
        self._communication = Provider(factory)
        return self

    def add_notification_sender(
        self, factory: Callable[[], NotificationSender]
    ) -> "Container":
        """Add a notification sender."""
        self._notification_senders.append(Provider(factory))
        self._notification_service = None
        return self

    def configure_from_settings(self, settings: Optional[Any] = None) -> "Container":
        """Wire every component from application settings."""
        from taskpulse.ai.client import ChatCompletionClient
        from taskpulse.notifications import LogNotificationSender, WebhookNotificationSender
        from taskpulse.repositories import InMemoryTaskStore, SQLiteTaskStore

        settings = settings or self.settings
        storage = settings.storage
        ai = settings.ai
        communication = settings.communication
        notify = settings.notifications

        if storage.backend == "memory":
            self.configure_store(InMemoryTaskStore)
        else:
            self.configure_store(lambda: SQLiteTaskStore(storage.path))

        def build_engine() -> InsightEngine:
            if ai.api_key is None:
                logger.warning(
                    "OpenAI API key not found. AI features will use fallback responses."
                )
                return InsightEngine()
            client = ChatCompletionClient(
                ai.api_key.get_secret_value(),
                model=ai.model,
                base_url=ai.base_url,
            )
            return InsightEngine(client)

        self.configure_engine(build_engine)
        self.configure_communication(
            lambda: CommunicationManager(
                gmail_enabled=communication.gmail_enabled,
                discord_enabled=communication.discord_enabled,
            )
        )

        self.notifications_enabled = notify.enabled
        self.add_notification_sender(LogNotificationSender)
        if notify.webhook_url:
            api_key = (
                notify.webhook_api_key.get_secret_value()
                if notify.webhook_api_key
                else None
            )
            self.add_notification_sender(
                lambda: WebhookNotificationSender(notify.webhook_url, api_key=api_key)
            )
        return self

    def reset(self) -> None:
        """Reset all providers (for testing)."""
        for provider in (
            self._store,
            self._engine,
            self._communication,
            self._notification_service,
        ):
            if provider:
                provider.reset()
        for sender in self._notification_senders:
            sender.reset()
        self._notification_senders.clear()
        self._settings = None


# Global container instance
container = Container()


def get_container() -> Container:
    """Get the global container instance."""
    return container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global container
    container.reset()
    container = Container()
