"""Accessory status model exposed to the accessory protocol."""
from dataclasses import dataclass
from enum import Enum


class StatusFault(Enum):
    """Values of the accessory protocol "status fault" characteristic."""
    NO_FAULT = 0
    GENERAL_FAULT = 1


@dataclass(frozen=True)
class AccessoryStatus:
    """
    Resolved state of a sensor accessory at one point in time.
    """
    value: float
    active: bool
    fault: StatusFault = StatusFault.NO_FAULT
