"""
FlightSchedule model - schedule/status documents keyed by flight number.

One row per flight number (upsert pattern). Departure and arrival legs
are flattened into prefixed columns.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from skyguard.models.base import Base


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class FlightSchedule(Base):
    """Published schedule and live status for a flight number."""

    __tablename__ = 'flight_schedules'

    flight_number: Mapped[str] = mapped_column(
        String(10),
        primary_key=True,
        comment='IATA flight number (e.g., LH400)'
    )

    airline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    airline_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    status: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment='scheduled, active, landed, delayed, cancelled, ...'
    )

    aircraft_registration: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        index=True,
        comment='Tail number of the operating aircraft'
    )
    aircraft_type: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)

    # Departure leg
    departure_airport: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    departure_iata: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    departure_scheduled: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    departure_estimated: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    departure_actual: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    departure_terminal: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    departure_gate: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # Arrival leg
    arrival_airport: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    arrival_iata: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    arrival_scheduled: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    arrival_estimated: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    arrival_actual: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f'<FlightSchedule {self.flight_number} {self.status or "?"}>'

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'flight_number': self.flight_number,
            'airline': self.airline,
            'airline_code': self.airline_code,
            'status': self.status,
            'aircraft': {
                'registration': self.aircraft_registration,
                'type': self.aircraft_type,
            },
            'departure': {
                'airport': self.departure_airport,
                'iata': self.departure_iata,
                'scheduled': _iso(self.departure_scheduled),
                'estimated': _iso(self.departure_estimated),
                'actual': _iso(self.departure_actual),
                'terminal': self.departure_terminal,
                'gate': self.departure_gate,
            },
            'arrival': {
                'airport': self.arrival_airport,
                'iata': self.arrival_iata,
                'scheduled': _iso(self.arrival_scheduled),
                'estimated': _iso(self.arrival_estimated),
                'actual': _iso(self.arrival_actual),
            },
            'last_updated': _iso(self.last_updated),
        }
