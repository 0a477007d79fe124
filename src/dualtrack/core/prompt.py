"""Prompts for the grounded-reasoning call."""

from __future__ import annotations

from collections.abc import Sequence

from .reasoning import GroundingRequest
from .state import ChatMessage

PRECISION_SYSTEM_PROMPT = """You are a voice-first coding assistant reviewing a pull request.

You MUST answer with TWO distinct outputs in valid JSON:
1. "voice": a natural, conversational summary. NO markdown, NO code blocks, NO asterisks.
   Speak like a senior engineer explaining something to a colleague. Keep it short.
2. "screen": the full technical answer with Markdown, code blocks and details.

CONTEXT:
File: {file_path}
PR: {pr_title}
{pr_description}
--- REQUIREMENTS TO CHECK ---
{requirements}
---

FILE CONTENT (verified):
```
{file_content}
```

INSTRUCTIONS:
1. Answer the user's question from the code above.
2. "voice" must read well aloud: no symbols, markdown or code.
3. "screen" carries the technical detail with proper Markdown.
4. Do not make things up. If the code does not say, say so.

RESPONSE FORMAT (strict JSON):
{{"voice": "Here's what I found...", "screen": "## Analysis\\n..."}}
"""


def build_system_prompt(request: GroundingRequest) -> str:
    requirements = "\n".join(f"- {item}" for item in request.requirements) or "(No requirements loaded)"
    description = f"Description: {request.pr_description}\n" if request.pr_description else ""
    return PRECISION_SYSTEM_PROMPT.format(
        file_path=request.file_path or "(none)",
        pr_title=request.pr_title,
        pr_description=description,
        requirements=requirements,
        file_content=request.file_content or "(not loaded)",
    )


def build_messages(user_text: str, history: Sequence[ChatMessage], request: GroundingRequest) -> list[dict[str, str]]:
    """Chat messages for one grounded call: system prompt, prior turns, then the question."""
    messages = [{"role": "system", "content": build_system_prompt(request)}]
    messages.extend({"role": item.role, "content": item.content} for item in history if item.role != "system")
    messages.append({"role": "user", "content": user_text})
    return messages


def build_context_snapshot(history: Sequence[ChatMessage]) -> str:
    """Plain-text view of the conversation, for diagnostics and trace export."""
    snapshot = "=== CONTEXT SNAPSHOT ===\n\n"
    if history:
        snapshot += "## CONVERSATION_HISTORY\n"
        snapshot += "".join(f"{item.role}: {item.content}\n" for item in history)
    return snapshot
