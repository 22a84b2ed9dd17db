from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import COMPLETED_DISPLAY_SECONDS
from .core.enums import DataSource
from .database.connection import DBConfig, DatabaseConnection
from .history.service import HistoryAggregator
from .history.sources.local_source import LocalSessionSource
from .history.sources.remote_source import RemoteSessionSource
from .identity.flask_identity import FlaskSessionIdentityProvider
from .identity.provider import IdentityProvider
from .rates.mysql_rate_settings_repository import MySQLRateSettingsRepository
from .rates.provider import RateProvider
from .rates.repository import RateSettingsRepository
from .rates.service import RateSettingsService
from .sessions.local_store import JsonFileKeyValueStore, KeyValueStore, LocalFallbackStore
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.registry import SessionRegistry
from .sessions.repository import SessionRepository
from .sessions.retry import RetryPolicy, Scheduler, ThreadingScheduler
from .sessions.service import SessionLifecycle
from .sessions.sync import OfflineSyncService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    rate_settings_repo: RateSettingsRepository
    local_store: LocalFallbackStore

    identity: IdentityProvider
    rate_provider: RateProvider
    rate_settings_service: RateSettingsService
    registry: SessionRegistry
    sync_service: OfflineSyncService
    history: HistoryAggregator


def build_services(
    *,
    sessions_repo: SessionRepository,
    rate_settings_repo: RateSettingsRepository,
    key_value_store: KeyValueStore,
    identity: IdentityProvider,
    scheduler: Scheduler,
    retry_policy: Optional[RetryPolicy] = None,
    completed_display_seconds: float = COMPLETED_DISPLAY_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    local_store = LocalFallbackStore(key_value_store)
    rate_provider = RateProvider(rate_settings_repo)
    retry_policy = retry_policy or RetryPolicy()

    def new_lifecycle(user_id: str) -> SessionLifecycle:
        return SessionLifecycle(
            sessions_repo,
            local_store,
            rate_provider,
            identity,
            scheduler,
            retry_policy=retry_policy,
            completed_display_seconds=completed_display_seconds,
        )

    history = HistoryAggregator(
        [
            RemoteSessionSource(sessions_repo, with_locations=True, name=DataSource.REMOTE),
            RemoteSessionSource(sessions_repo, with_locations=False, name=DataSource.REMOTE_SIMPLE),
            LocalSessionSource(local_store),
        ]
    )

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        rate_settings_repo=rate_settings_repo,
        local_store=local_store,
        identity=identity,
        rate_provider=rate_provider,
        rate_settings_service=RateSettingsService(rate_settings_repo),
        registry=SessionRegistry(new_lifecycle),
        sync_service=OfflineSyncService(sessions_repo, local_store),
        history=history,
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    retry_policy = RetryPolicy(
        backoff_seconds=tuple(getattr(settings, "RETRY_BACKOFF_SECONDS", RetryPolicy.backoff_seconds)),
        max_attempts=int(getattr(settings, "MAX_RETRY_ATTEMPTS", RetryPolicy.max_attempts)),
    )

    return build_services(
        sessions_repo=MySQLSessionRepository(conn),
        rate_settings_repo=MySQLRateSettingsRepository(conn),
        key_value_store=JsonFileKeyValueStore(getattr(settings, "LOCAL_STORE_PATH", "instance/local_store.json")),
        identity=FlaskSessionIdentityProvider(),
        scheduler=ThreadingScheduler(),
        retry_policy=retry_policy,
        completed_display_seconds=float(getattr(settings, "COMPLETED_DISPLAY_SECONDS", COMPLETED_DISPLAY_SECONDS)),
        conn=conn,
    )
