"""Orchestration core: turn state, graph, command bridge and synthesis."""

from .bridge import CommandBridge
from .classifier import classify_intent
from .commands import CommandSpec, extract_command
from .graph import NodeName, TurnGraph, build_graph
from .orchestrator import Orchestrator
from .reasoning import FileContentProvider, GroundedAnswer, GroundedReasoner, GroundingRequest
from .state import (
    Classification,
    ReasoningMode,
    ResponsePlan,
    TextMessage,
    ToolOutput,
    TurnState,
    VoiceUtterance,
)
from .synthesis import synthesize_response

__all__ = [
    "Classification",
    "CommandBridge",
    "CommandSpec",
    "FileContentProvider",
    "GroundedAnswer",
    "GroundedReasoner",
    "GroundingRequest",
    "NodeName",
    "Orchestrator",
    "ReasoningMode",
    "ResponsePlan",
    "TextMessage",
    "ToolOutput",
    "TurnGraph",
    "TurnState",
    "VoiceUtterance",
    "build_graph",
    "classify_intent",
    "extract_command",
    "synthesize_response",
]
