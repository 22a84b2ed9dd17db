from __future__ import annotations

from typing import Optional

from ..common.validators import require_non_empty, require_non_negative
from ..core.constants import (
    DEFAULT_HOURLY_RATE,
    DEFAULT_OVERTIME_RATE,
    DEFAULT_OVERTIME_THRESHOLD_HOURS,
)
from ..core.exceptions import ValidationError
from ..core.logging import get_logger
from .model import RateSettings
from .repository import RateSettingsRepository

logger = get_logger(__name__)


class RateSettingsService:
    """Use case: maintain a user's default rates (profile screen)."""

    def __init__(self, settings: RateSettingsRepository):
        self._settings = settings

    def get(self, user_id: str) -> RateSettings:
        existing = self._settings.get_for_user(user_id)
        if existing:
            return existing
        return default_settings(user_id)

    def update(
        self,
        *,
        user_id: str,
        hourly_rate,
        overtime_rate=None,
        overtime_threshold_hours=None,
    ) -> RateSettings:
        user_id = require_non_empty(str(user_id or ""), "User")
        hourly = require_non_negative(hourly_rate, "Hourly rate")
        overtime: Optional[float] = None
        if overtime_rate not in (None, ""):
            overtime = require_non_negative(overtime_rate, "Overtime rate")
        threshold: Optional[float] = None
        if overtime_threshold_hours not in (None, ""):
            threshold = require_non_negative(overtime_threshold_hours, "Overtime threshold")
            if threshold > 24:
                raise ValidationError("Overtime threshold cannot exceed 24 hours")

        settings = RateSettings(
            user_id=user_id,
            hourly_rate=hourly,
            overtime_rate=overtime,
            overtime_threshold_hours=threshold,
        )
        self._settings.upsert(settings)
        logger.info("rate_settings_saved", user_id=user_id, hourly_rate=hourly)
        return settings

    def ensure_defaults(self, user_id: str) -> bool:
        """Create the default settings row for a new user."""

        created = self._settings.create_if_missing(default_settings(user_id))
        if created:
            logger.info("rate_settings_initialized", user_id=user_id)
        return created


def default_settings(user_id: str) -> RateSettings:
    return RateSettings(
        user_id=str(user_id),
        hourly_rate=DEFAULT_HOURLY_RATE,
        overtime_rate=DEFAULT_OVERTIME_RATE,
        overtime_threshold_hours=DEFAULT_OVERTIME_THRESHOLD_HOURS,
    )
