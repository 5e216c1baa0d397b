"""Bus contract and the NATS-backed implementation."""

from .base import Bus, BusError, Pattern, pattern_subject
from .nats_bus import NatsBus

__all__ = ["Bus", "BusError", "NatsBus", "Pattern", "pattern_subject"]
