"""
Airport and Zone models - static geofence reference data.

Each airport owns an ordered set of circular safety zones (approach,
terminal, ...). Rows are provisioned out-of-band (see skyguard.seed) and
loaded once into the in-memory zone index at startup.
"""

from typing import List, Optional

from sqlalchemy import String, Float, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skyguard.models.base import Base


class Airport(Base):
    """Airport reference point."""

    __tablename__ = 'airports'

    code: Mapped[str] = mapped_column(
        String(4),
        primary_key=True,
        comment='ICAO airport code (e.g., EDDF)'
    )

    iata: Mapped[Optional[str]] = mapped_column(
        String(3),
        nullable=True,
        comment='IATA airport code (e.g., FRA)'
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    zones: Mapped[List['Zone']] = relationship(
        back_populates='airport',
        order_by='Zone.id',
        cascade='all, delete-orphan',
    )

    def __repr__(self) -> str:
        return f'<Airport {self.code} {self.name}>'


class Zone(Base):
    """
    Circular geofence anchored to an airport.

    A point is inside the zone when its great-circle distance to the
    center is strictly less than the radius.
    """

    __tablename__ = 'zones'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    airport_code: Mapped[str] = mapped_column(
        ForeignKey('airports.code'),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    radius_m: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment='Zone radius in meters'
    )

    airport: Mapped[Airport] = relationship(back_populates='zones')

    __table_args__ = (
        CheckConstraint('radius_m > 0', name='ck_zones_radius_positive'),
    )

    def __repr__(self) -> str:
        return f'<Zone {self.airport_code}/{self.name} r={self.radius_m:.0f}m>'
