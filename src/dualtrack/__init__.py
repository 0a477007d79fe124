"""dualtrack - voice-and-screen answers for code review turns."""

from .core import Orchestrator, TextMessage, TurnState, VoiceUtterance
from .events import EventChannel

__version__ = "0.1.0"

__all__ = ["EventChannel", "Orchestrator", "TextMessage", "TurnState", "VoiceUtterance"]
