"""Movement simulation for a transport circulating on a loop."""

from .engine import InvalidActionSequenceError, MovementEngine
from .loop import build_loop
from .notifications import NotificationQueue
from .ticker import Ticker
from .transport import SimulatedTransport, create_simulation

__all__ = [
    "InvalidActionSequenceError",
    "MovementEngine",
    "NotificationQueue",
    "SimulatedTransport",
    "Ticker",
    "build_loop",
    "create_simulation",
]
