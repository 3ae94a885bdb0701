import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.change_feed import InMemoryChangeFeed
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.path_cache import RecordingPathInvalidator
from src.adapters.sqlite.logs import SQLiteLogStore
from src.adapters.sqlite.repos import (
    SQLiteBookingRepo,
    SQLiteGalleryRepo,
    SQLiteHomepageRepo,
    SQLiteNotificationPreferencesRepo,
    SQLiteNotificationRepo,
    SQLiteOrderRepo,
    SQLiteProductRepo,
    SQLiteServiceRepo,
    SQLiteTestimonialRepo,
)
from src.api.auth_utils import decode_access_token, profile_from_claims
from src.components.logbuffer import BufferedLogger
from src.components.notifications import Notifier
from src.components.safe_exec import RetryPolicyRegistry, SafeExecutor
from src.domain.entities import Profile
from src.rules.loader import load_rules
from src.rules.models import Rules
from src.services.bookings import BookingActions
from src.services.catalog import ProductActions, ServiceActions
from src.services.content import GalleryActions, HomepageActions, TestimonialActions
from src.services.email import EmailService
from src.services.logs import LogViewer
from src.services.notifications import NotificationActions
from src.services.orders import OrderActions

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        data_dir = os.environ.get("LUXE_DATA_DIR", "./data")
        self.data_dir = Path(data_dir)
        self.db_path = f"{data_dir}/luxe.db"
        self.migrations_dir = str(self.base_dir / "migrations")
        self.rules_path = Path(os.environ.get("LUXE_RULES_PATH", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_product_repo(settings: Settings = Depends(get_settings)) -> SQLiteProductRepo:
    return SQLiteProductRepo(settings.db_path)


def get_service_repo(settings: Settings = Depends(get_settings)) -> SQLiteServiceRepo:
    return SQLiteServiceRepo(settings.db_path)


def get_booking_repo(settings: Settings = Depends(get_settings)) -> SQLiteBookingRepo:
    return SQLiteBookingRepo(settings.db_path)


def get_order_repo(settings: Settings = Depends(get_settings)) -> SQLiteOrderRepo:
    return SQLiteOrderRepo(settings.db_path)


def get_gallery_repo(settings: Settings = Depends(get_settings)) -> SQLiteGalleryRepo:
    return SQLiteGalleryRepo(settings.db_path)


def get_testimonial_repo(settings: Settings = Depends(get_settings)) -> SQLiteTestimonialRepo:
    return SQLiteTestimonialRepo(settings.db_path)


def get_homepage_repo(settings: Settings = Depends(get_settings)) -> SQLiteHomepageRepo:
    return SQLiteHomepageRepo(settings.db_path)


def get_log_store(settings: Settings = Depends(get_settings)) -> SQLiteLogStore:
    return SQLiteLogStore(settings.db_path)


# --- Process-wide singletons ---

_change_feed_instance: InMemoryChangeFeed | None = None
_invalidator_instance: RecordingPathInvalidator | None = None
_email_adapter_instance: DevEmailAdapter | None = None
_logger_instance: BufferedLogger | None = None


def get_change_feed() -> InMemoryChangeFeed:
    """Get change feed singleton."""
    global _change_feed_instance
    if _change_feed_instance is None:
        _change_feed_instance = InMemoryChangeFeed()
    return _change_feed_instance


def get_invalidator() -> RecordingPathInvalidator:
    """Get path invalidator singleton."""
    global _invalidator_instance
    if _invalidator_instance is None:
        _invalidator_instance = RecordingPathInvalidator()
    return _invalidator_instance


def get_email_adapter() -> DevEmailAdapter:
    """Get email adapter singleton (dev adapter logs instead of sending)."""
    global _email_adapter_instance
    if _email_adapter_instance is None:
        _email_adapter_instance = DevEmailAdapter()
    return _email_adapter_instance


def get_buffered_logger() -> BufferedLogger:
    """Get buffered logger singleton, writing to the SQLite logs table."""
    global _logger_instance
    if _logger_instance is None:
        settings = get_settings()
        rules = get_rules(settings)
        _logger_instance = BufferedLogger(
            SQLiteLogStore(settings.db_path),
            flush_interval_ms=rules.logging.flush_interval_ms,
            max_buffer=rules.logging.max_buffer,
            max_inflight_batches=rules.logging.max_inflight_batches,
        )
    return _logger_instance


def get_notification_repo(
    settings: Settings = Depends(get_settings),
    feed: InMemoryChangeFeed = Depends(get_change_feed),
) -> SQLiteNotificationRepo:
    return SQLiteNotificationRepo(settings.db_path, publish=feed.publish)


def get_preferences_repo(
    settings: Settings = Depends(get_settings),
    feed: InMemoryChangeFeed = Depends(get_change_feed),
) -> SQLiteNotificationPreferencesRepo:
    return SQLiteNotificationPreferencesRepo(settings.db_path, publish=feed.publish)


# --- Executor / policies ---
def get_executor(
    rules: Rules = Depends(get_rules),
    log: BufferedLogger = Depends(get_buffered_logger),
) -> SafeExecutor:
    return SafeExecutor(log, application=rules.app.name)


def get_policies(rules: Rules = Depends(get_rules)) -> RetryPolicyRegistry:
    return RetryPolicyRegistry.from_rules(rules.retry)


def get_email_service(
    rules: Rules = Depends(get_rules),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    sender: DevEmailAdapter = Depends(get_email_adapter),
) -> EmailService:
    return EmailService(
        sender,
        executor,
        policies.for_service("email"),
        site_url=rules.app.site_url,
        currency_symbol=rules.app.currency_symbol,
    )


def get_notifier(
    rules: Rules = Depends(get_rules),
    repo: SQLiteNotificationRepo = Depends(get_notification_repo),
) -> Notifier:
    return Notifier(repo, currency_symbol=rules.app.currency_symbol)


# --- Action services ---
def get_product_actions(
    repo: SQLiteProductRepo = Depends(get_product_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> ProductActions:
    return ProductActions(repo, executor, policies, invalidator)


def get_service_actions(
    repo: SQLiteServiceRepo = Depends(get_service_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> ServiceActions:
    return ServiceActions(repo, executor, policies, invalidator)


def get_gallery_actions(
    repo: SQLiteGalleryRepo = Depends(get_gallery_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> GalleryActions:
    return GalleryActions(repo, executor, policies, invalidator)


def get_testimonial_actions(
    repo: SQLiteTestimonialRepo = Depends(get_testimonial_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> TestimonialActions:
    return TestimonialActions(repo, executor, policies, invalidator)


def get_homepage_actions(
    repo: SQLiteHomepageRepo = Depends(get_homepage_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> HomepageActions:
    return HomepageActions(repo, executor, policies, invalidator)


def get_booking_actions(
    repo: SQLiteBookingRepo = Depends(get_booking_repo),
    services: SQLiteServiceRepo = Depends(get_service_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
    email: EmailService = Depends(get_email_service),
    notifier: Notifier = Depends(get_notifier),
) -> BookingActions:
    return BookingActions(repo, services, executor, policies, invalidator, email, notifier)


def get_order_actions(
    repo: SQLiteOrderRepo = Depends(get_order_repo),
    products: SQLiteProductRepo = Depends(get_product_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
    email: EmailService = Depends(get_email_service),
    notifier: Notifier = Depends(get_notifier),
) -> OrderActions:
    return OrderActions(repo, products, executor, policies, invalidator, email, notifier)


def get_notification_actions(
    repo: SQLiteNotificationRepo = Depends(get_notification_repo),
    preferences: SQLiteNotificationPreferencesRepo = Depends(get_preferences_repo),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
    invalidator: RecordingPathInvalidator = Depends(get_invalidator),
) -> NotificationActions:
    return NotificationActions(repo, preferences, executor, policies, invalidator)


def get_log_viewer(
    store: SQLiteLogStore = Depends(get_log_store),
    executor: SafeExecutor = Depends(get_executor),
    policies: RetryPolicyRegistry = Depends(get_policies),
) -> LogViewer:
    return LogViewer(store, executor, policies)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    rules: Annotated[Rules, Depends(get_rules)],
) -> Profile | None:
    """
    The signed-in profile, or None for anonymous callers.

    Gating is left to the action layer, so a missing or invalid token is
    not an error here.
    """
    # Cookie wins over the Authorization header
    cookie_token = request.cookies.get("access_token")
    if cookie_token:
        token = cookie_token.removeprefix("Bearer ").strip()

    if not token:
        return None

    payload = decode_access_token(token, rules.auth.algorithm)
    if not payload:
        logger.debug("Ignoring invalid access token")
        return None

    return profile_from_claims(payload)


def require_admin_user(
    user: Annotated[Profile | None, Depends(get_current_user)],
) -> Profile:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Please sign in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: Admin access required",
        )
    return user
