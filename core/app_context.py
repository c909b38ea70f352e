from dataclasses import dataclass
from typing import Optional

from core.config_loader import AppConfig
from core.matcher import MatchFinder
from core.realtime import RealtimeChannel, NullRealtimeChannel, RedisRealtimeChannel
from core.scorer import CompatibilityScorer
from notification.service import NotificationDispatcher, EmailDispatcher


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Services hold a session factory rather than a session; each operation
    opens its own unit of work via swap_uow().
    """
    config: AppConfig
    session_factory: object
    scorer: CompatibilityScorer
    finder: MatchFinder
    notification_dispatcher: NotificationDispatcher
    realtime: RealtimeChannel
    credit_ledger: "CreditLedger"
    conversation_coordinator: "ConversationCoordinator"
    listing_service: "ListingService"
    email_dispatcher: Optional[EmailDispatcher] = None

    @classmethod
    def build(
        cls,
        config: AppConfig,
        session_factory=None,
        email_dispatcher: Optional[EmailDispatcher] = None,
        realtime: Optional[RealtimeChannel] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Session factory for all units of work
                (defaults to one bound to config.database.url)
            email_dispatcher: Override for the configured email dispatcher
            realtime: Override for the configured realtime channel

        Returns:
            Fully wired AppContext instance
        """
        # Imported here: the web services import core, not the other way round at module load
        from web.backend.services.credit_service import CreditLedger
        from web.backend.services.conversation_service import ConversationCoordinator
        from web.backend.services.listing_service import ListingService

        if session_factory is None:
            from database.database import create_db_engine, create_session_factory
            session_factory = create_session_factory(create_db_engine(config.database.url))

        scorer = CompatibilityScorer(config.matching.scorer)
        finder = MatchFinder(scorer)

        if email_dispatcher is None and config.notifications.email_enabled:
            email_dispatcher = cls._build_email_dispatcher(config)

        notification_dispatcher = NotificationDispatcher(
            session_factory=session_factory,
            email_dispatcher=email_dispatcher,
            base_url=config.notifications.base_url,
            email_enabled=config.notifications.email_enabled,
            preview_length=config.notifications.preview_length
        )

        if realtime is None:
            realtime = cls._build_realtime(config)

        credit_ledger = CreditLedger(session_factory)

        conversation_coordinator = ConversationCoordinator(
            session_factory=session_factory,
            ledger=credit_ledger,
            dispatcher=notification_dispatcher,
            realtime=realtime,
            pay_to_chat_enabled=config.features.pay_to_chat,
            conversation_cost=config.credits.conversation_cost
        )

        listing_service = ListingService(
            session_factory=session_factory,
            finder=finder,
            dispatcher=notification_dispatcher,
            features=config.features,
            matching=config.matching
        )

        return cls(
            config=config,
            session_factory=session_factory,
            scorer=scorer,
            finder=finder,
            notification_dispatcher=notification_dispatcher,
            realtime=realtime,
            credit_ledger=credit_ledger,
            conversation_coordinator=conversation_coordinator,
            listing_service=listing_service,
            email_dispatcher=email_dispatcher
        )

    @staticmethod
    def _build_email_dispatcher(config: AppConfig) -> EmailDispatcher:
        notification_config = config.notifications
        return EmailDispatcher(
            channel_type=notification_config.email_channel,
            from_email=notification_config.from_email,
            use_async_queue=notification_config.use_async_queue,
            redis_url=notification_config.redis_url
        )

    @staticmethod
    def _build_realtime(config: AppConfig) -> RealtimeChannel:
        if not config.realtime.enabled:
            return NullRealtimeChannel()
        return RedisRealtimeChannel(redis_url=config.realtime.redis_url)
