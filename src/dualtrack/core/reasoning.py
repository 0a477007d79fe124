"""Collaborator contracts consumed by the orchestration graph."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from .state import ChatMessage


class GroundingRequest(BaseModel):
    """Everything the grounded-reasoning call may cite."""

    file_path: str = ""
    file_content: str = ""
    pr_title: str = "Unknown PR"
    pr_description: str = ""
    requirements: list[str] = Field(default_factory=list)


class GroundedAnswer(BaseModel):
    voice: str
    screen: str


@runtime_checkable
class FileContentProvider(Protocol):
    def get_active_file_content(self, path: str) -> str | None: ...


@runtime_checkable
class GroundedReasoner(Protocol):
    async def generate_grounded_response(
        self,
        user_text: str,
        history: Sequence[ChatMessage],
        request: GroundingRequest,
    ) -> GroundedAnswer | None:
        """Answer ``user_text`` from the request's sources, or None when no grounded answer exists."""
        ...


class NoFiles:
    """File provider for callers that have no repository attached."""

    def get_active_file_content(self, path: str) -> str | None:
        return None
