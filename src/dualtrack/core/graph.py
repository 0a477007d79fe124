"""The orchestration graph: a fixed node table and the loop that drives one turn.

Topology::

    intent_classification --chitchat--> response_synthesis
            |
            v
    context_selection -> precision_router --deep--> deep_reasoning ----+
                                 |                                      |
                                 +--standard--> standard_reasoning -----+
                                                                        v
                                           tool_execution -> response_synthesis -> end
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from ..errors import GraphError
from ..events import AgentThinkingEvent, EventChannel, ThinkingStage
from .bridge import CommandBridge
from .classifier import classify_intent, intent_text
from .commands import CommandSpec
from .prompt import build_context_snapshot
from .reasoning import FileContentProvider, GroundedReasoner, GroundingRequest
from .state import (
    Classification,
    PullRequestInfo,
    ReasoningMode,
    ResponsePlan,
    ScreenPlan,
    TextMessage,
    ToolOutput,
    TurnContext,
    TurnState,
    apply_update,
)
from .synthesis import synthesize_response

STANDARD_VOICE = "I am ready to help with your code."
APOLOGY_VOICE = "I encountered an error analyzing the code."
NO_COMMAND_REQUIRED = "No command execution required"


class NodeName(str, Enum):
    INTENT_CLASSIFICATION = "intent_classification"
    CONTEXT_SELECTION = "context_selection"
    PRECISION_ROUTER = "precision_router"
    STANDARD_REASONING = "standard_reasoning"
    DEEP_REASONING = "deep_reasoning"
    TOOL_EXECUTION = "tool_execution"
    RESPONSE_SYNTHESIS = "response_synthesis"


NodeHandler = Callable[[TurnState], Awaitable[dict[str, Any]]]
Router = Callable[[TurnState], "NodeName | None"]


@dataclass(frozen=True)
class Node:
    handler: NodeHandler
    route: Router


def goto(target: NodeName | None) -> Router:
    def route(_state: TurnState) -> NodeName | None:
        return target

    return route


def route_after_classification(state: TurnState) -> NodeName:
    if state.classification == Classification.CHITCHAT:
        return NodeName.RESPONSE_SYNTHESIS
    return NodeName.CONTEXT_SELECTION


def route_after_precision(state: TurnState) -> NodeName:
    if state.reasoning_mode == ReasoningMode.DEEP:
        return NodeName.DEEP_REASONING
    return NodeName.STANDARD_REASONING


def standard_plan() -> ResponsePlan:
    return ResponsePlan(voice=STANDARD_VOICE, screen=ScreenPlan(action="none", payload={}))


def apology_plan() -> ResponsePlan:
    return ResponsePlan(voice=APOLOGY_VOICE, screen=ScreenPlan(action="error", payload={"message": "Analysis failed"}))


class TurnNodes:
    """Node handlers bound to one orchestrator's collaborators.

    Each handler returns a partial state update and never raises for expected
    failures; those are expressed in ``tool_output`` or ``response_plan``.
    """

    def __init__(
        self,
        channel: EventChannel,
        files: FileContentProvider,
        reasoner: GroundedReasoner | None,
        bridge: CommandBridge,
    ) -> None:
        self._channel = channel
        self._files = files
        self._reasoner = reasoner
        self._bridge = bridge

    def _think(self, stage: ThinkingStage, message: str) -> None:
        self._channel.emit(AgentThinkingEvent(stage=stage, message=message), source="agent")

    async def intent_classification(self, state: TurnState) -> dict[str, Any]:
        self._think("started", "Classifying intent...")
        classification = classify_intent(state.user_intent)
        logger.info("graph.classified classification={}", classification.value)
        return {"classification": classification}

    async def context_selection(self, state: TurnState) -> dict[str, Any]:
        self._think("processing", "Gathering context...")
        intent = state.user_intent
        active_file = ""
        if isinstance(intent, TextMessage) and intent.context is not None:
            active_file = intent.context.active_file or ""

        content = ""
        if active_file:
            try:
                content = self._files.get_active_file_content(active_file) or ""
            except Exception:
                logger.opt(exception=True).warning("graph.file_lookup_failed path={}", active_file)
        return {"context": TurnContext(active_file=active_file, active_file_content=content, relevant_files=[])}

    async def precision_router(self, state: TurnState) -> dict[str, Any]:
        if state.classification == Classification.CODE_QUERY:
            return {"reasoning_mode": ReasoningMode.DEEP}
        return {"reasoning_mode": ReasoningMode.STANDARD}

    async def standard_reasoning(self, state: TurnState) -> dict[str, Any]:
        return {"response_plan": standard_plan()}

    async def deep_reasoning(self, state: TurnState) -> dict[str, Any]:
        self._think("processing", "Analyzing with grounded reasoning...")
        intent = state.user_intent
        context = state.context or TurnContext()
        pr = PullRequestInfo()
        requirements: list[str] = []
        if isinstance(intent, TextMessage):
            pr = intent.pr or pr
            requirements = list(intent.requirements)

        request = GroundingRequest(
            file_path=context.active_file,
            file_content=context.active_file_content,
            pr_title=pr.title,
            pr_description=pr.description,
            requirements=requirements,
        )
        if self._reasoner is None:
            logger.warning("graph.deep_reasoning_unavailable reason=no_reasoner")
            return {"response_plan": apology_plan()}

        logger.debug("graph.deep_reasoning file={} {}", request.file_path, build_context_snapshot(state.history))
        try:
            answer = await self._reasoner.generate_grounded_response(intent_text(intent), list(state.history), request)
        except Exception:
            logger.opt(exception=True).warning("graph.deep_reasoning_failed file={}", request.file_path)
            answer = None

        if answer is None:
            return {"response_plan": apology_plan()}
        return {
            "response_plan": ResponsePlan(
                voice=answer.voice,
                screen=ScreenPlan(action="markdown_response", payload={"content": answer.screen}),
            )
        }

    async def tool_execution(self, state: TurnState) -> dict[str, Any]:
        if state.classification != Classification.COMMAND:
            return {"tool_output": ToolOutput(success=True, data=NO_COMMAND_REQUIRED)}

        def announce(spec: CommandSpec) -> None:
            self._think("processing", f"Executing: {spec.display}...")

        tool_output = await self._bridge.dispatch(intent_text(state.user_intent), on_start=announce)
        return {"tool_output": tool_output}

    async def response_synthesis(self, state: TurnState) -> dict[str, Any]:
        self._think("completed", "Synthesis complete.")
        return {"response_plan": synthesize_response(state.classification, state.tool_output, state.response_plan)}


class TurnGraph:
    """Runs nodes from the entry node until a route returns None."""

    def __init__(self, nodes: Mapping[NodeName, Node], *, entry: NodeName = NodeName.INTENT_CLASSIFICATION) -> None:
        if entry not in nodes:
            raise GraphError(f"Entry node {entry.value} is not in the node table")
        self._nodes = dict(nodes)
        self._entry = entry

    @property
    def nodes(self) -> dict[NodeName, Node]:
        return dict(self._nodes)

    async def invoke(self, state: TurnState) -> TurnState:
        final_state, _path = await self.invoke_with_path(state)
        return final_state

    async def invoke_with_path(self, state: TurnState) -> tuple[TurnState, list[NodeName]]:
        """Run one turn and also return the nodes visited, in order."""
        path: list[NodeName] = []
        current: NodeName | None = self._entry
        while current is not None:
            node = self._nodes.get(current)
            if node is None:
                raise GraphError(f"Unknown node: {current}")
            if current in path:
                raise GraphError(f"Node {current.value} visited twice in one turn")
            path.append(current)
            logger.debug("graph.enter node={}", current.value)
            update = await node.handler(state)
            state = apply_update(state, update)
            current = node.route(state)
        logger.info("graph.done path={}", "->".join(name.value for name in path))
        return state, path


def build_graph(
    channel: EventChannel,
    files: FileContentProvider,
    reasoner: GroundedReasoner | None,
    bridge: CommandBridge,
) -> TurnGraph:
    """Wire the fixed topology to one set of collaborators."""
    handlers = TurnNodes(channel, files, reasoner, bridge)
    table = {
        NodeName.INTENT_CLASSIFICATION: Node(handlers.intent_classification, route_after_classification),
        NodeName.CONTEXT_SELECTION: Node(handlers.context_selection, goto(NodeName.PRECISION_ROUTER)),
        NodeName.PRECISION_ROUTER: Node(handlers.precision_router, route_after_precision),
        NodeName.STANDARD_REASONING: Node(handlers.standard_reasoning, goto(NodeName.TOOL_EXECUTION)),
        NodeName.DEEP_REASONING: Node(handlers.deep_reasoning, goto(NodeName.TOOL_EXECUTION)),
        NodeName.TOOL_EXECUTION: Node(handlers.tool_execution, goto(NodeName.RESPONSE_SYNTHESIS)),
        NodeName.RESPONSE_SYNTHESIS: Node(handlers.response_synthesis, goto(None)),
    }
    return TurnGraph(table)
