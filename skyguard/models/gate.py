"""
Gate assignment graph - Terminal <- Gate <- GateAssignment.

Modelled as a small graph: a flight is ASSIGNED_TO a gate, a gate
BELONGS_TO a terminal. Lookups walk the edges by flight callsign.
"""

from typing import List, Optional

from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skyguard.models.base import Base


class Terminal(Base):
    """Airport terminal."""

    __tablename__ = 'terminals'

    name: Mapped[str] = mapped_column(String(50), primary_key=True)

    gates: Mapped[List['Gate']] = relationship(
        back_populates='terminal',
        order_by='Gate.gate_number',
    )

    def __repr__(self) -> str:
        return f'<Terminal {self.name}>'


class Gate(Base):
    """Gate belonging to a terminal."""

    __tablename__ = 'gates'

    gate_number: Mapped[str] = mapped_column(String(10), primary_key=True)

    terminal_name: Mapped[str] = mapped_column(
        ForeignKey('terminals.name'),
        nullable=False,
        index=True,
    )

    status: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        default='available',
    )

    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    terminal: Mapped[Terminal] = relationship(back_populates='gates')
    assignments: Mapped[List['GateAssignment']] = relationship(back_populates='gate')

    def __repr__(self) -> str:
        return f'<Gate {self.gate_number} ({self.terminal_name})>'


class GateAssignment(Base):
    """Edge from a flight callsign to its assigned gate."""

    __tablename__ = 'gate_assignments'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    callsign: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        comment='Flight identifier (e.g., LH400)'
    )

    gate_number: Mapped[str] = mapped_column(
        ForeignKey('gates.gate_number'),
        nullable=False,
    )

    gate: Mapped[Gate] = relationship(back_populates='assignments')

    __table_args__ = (
        UniqueConstraint('callsign', 'gate_number', name='uq_gate_assignment'),
    )

    def __repr__(self) -> str:
        return f'<GateAssignment {self.callsign} -> {self.gate_number}>'
