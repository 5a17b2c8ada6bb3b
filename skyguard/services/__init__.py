"""
Reference-data services.

Registry lookups with graceful degradation when the reference database is
slow or unavailable, and the aggregator that joins them with live data.
"""

from skyguard.services.registry import GateScheduleRegistry, GateInfo, GateStatus
from skyguard.services.aggregator import FlightAggregator, FlightView

__all__ = ['GateScheduleRegistry', 'GateInfo', 'GateStatus', 'FlightAggregator', 'FlightView']
