from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class LocationDetails:
    """A saved work location, or a manually entered address with its own rate.

    Saved locations carry the remote ``location_id``; manual entries do not.
    """

    address: str
    hourly_rate: Optional[float] = None
    overtime_rate: Optional[float] = None
    location_id: Optional[str] = None
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_meters: Optional[int] = None

    @property
    def is_manual_entry(self) -> bool:
        return self.location_id is None

    @property
    def label(self) -> str:
        return self.name or self.address

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "LocationDetails":
        return cls(
            address=str(data.get("address") or ""),
            hourly_rate=_opt_float(data.get("hourly_rate")),
            overtime_rate=_opt_float(data.get("overtime_rate")),
            location_id=str(data["location_id"]) if data.get("location_id") is not None else None,
            name=data.get("name"),
            latitude=_opt_float(data.get("latitude")),
            longitude=_opt_float(data.get("longitude")),
            radius_meters=int(data["radius_meters"]) if data.get("radius_meters") is not None else None,
        )


@dataclass(frozen=True)
class RateSettings:
    """Per-user default rates, edited from the profile screen."""

    user_id: str
    hourly_rate: float
    overtime_rate: Optional[float] = None
    overtime_threshold_hours: Optional[float] = None


@dataclass(frozen=True)
class ResolvedRates:
    """Rates frozen onto a session when it starts."""

    hourly_rate: float
    overtime_rate: float
    overtime_threshold_hours: float
    source: str = "defaults"


def _opt_float(value) -> Optional[float]:
    return float(value) if value is not None else None
