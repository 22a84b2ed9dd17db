from __future__ import annotations

from typing import Optional

from ..core.constants import (
    DEFAULT_HOURLY_RATE,
    DEFAULT_OVERTIME_RATE,
    DEFAULT_OVERTIME_THRESHOLD_HOURS,
    OVERTIME_MULTIPLIER,
)
from ..core.exceptions import RemoteStoreError
from ..core.logging import get_logger
from .model import LocationDetails, RateSettings, ResolvedRates
from .repository import RateSettingsRepository

logger = get_logger(__name__)

DEFAULT_RATES = ResolvedRates(
    hourly_rate=DEFAULT_HOURLY_RATE,
    overtime_rate=DEFAULT_OVERTIME_RATE,
    overtime_threshold_hours=DEFAULT_OVERTIME_THRESHOLD_HOURS,
    source="defaults",
)


class RateProvider:
    """Resolve the effective rates for a user at session start.

    A location with its own hourly rate wins over the user's settings. When
    the settings cannot be read the last rates seen for that user (or the
    fixed defaults) are used, so the timer never fails on a rate lookup.
    """

    def __init__(self, settings: RateSettingsRepository):
        self._settings = settings
        self._last_known: dict[str, ResolvedRates] = {}

    def resolve(self, user_id: str, location: Optional[LocationDetails] = None) -> ResolvedRates:
        user_rates = self._user_rates(user_id)

        if location is not None and location.hourly_rate:
            hourly = float(location.hourly_rate)
            overtime = float(location.overtime_rate) if location.overtime_rate else hourly * OVERTIME_MULTIPLIER
            return ResolvedRates(
                hourly_rate=hourly,
                overtime_rate=overtime,
                overtime_threshold_hours=user_rates.overtime_threshold_hours,
                source="location",
            )

        return user_rates

    def _user_rates(self, user_id: str) -> ResolvedRates:
        try:
            settings = self._settings.get_for_user(user_id)
        except RemoteStoreError as exc:
            logger.warning("rate_lookup_failed", user_id=user_id, error=str(exc))
            return self._last_known.get(user_id, DEFAULT_RATES)

        rates = from_settings(settings) if settings else DEFAULT_RATES
        self._last_known[user_id] = rates
        return rates


def from_settings(settings: RateSettings) -> ResolvedRates:
    """Missing fields take the defaults; an explicit 0 is kept."""

    overtime_rate = settings.overtime_rate
    threshold = settings.overtime_threshold_hours
    return ResolvedRates(
        hourly_rate=float(settings.hourly_rate),
        overtime_rate=float(DEFAULT_OVERTIME_RATE if overtime_rate is None else overtime_rate),
        overtime_threshold_hours=float(DEFAULT_OVERTIME_THRESHOLD_HOURS if threshold is None else threshold),
        source="user_settings",
    )
