"""wirex: fine-grained reactive values and a service registry for UI applications."""

from importlib.metadata import version as _version

__version__ = _version("wirex")

from wirex._tracking import Tracker, TrackingError, default_tracker
from wirex.observable import Observable
from wirex.reaction import Reaction, autorun, reaction
from wirex.observer import Observer
from wirex.injectable import Injectable
from wirex.injector import (
    ConstructionError,
    Injector,
    NotRegisteredError,
    WirexError,
    default_injector,
)
# textual NOT auto-imported — opt-in only

__all__ = [
    "Observable",
    "Tracker",
    "TrackingError",
    "default_tracker",
    "Reaction",
    "autorun",
    "reaction",
    "Observer",
    "Injectable",
    "Injector",
    "default_injector",
    "WirexError",
    "NotRegisteredError",
    "ConstructionError",
]
