"""Fold command results or reasoning output into the final two-channel answer."""

from __future__ import annotations

from .state import Classification, CommandResult, ResponsePlan, ScreenPlan, ToolOutput

GREETING_VOICE = "Hi! I am ready to help with your code."


def greeting_plan() -> ResponsePlan:
    return ResponsePlan(voice=GREETING_VOICE, screen=ScreenPlan(action="none", payload={}))


def command_voice(tool_output: ToolOutput) -> str:
    if tool_output.success:
        return "Command finished successfully."
    if tool_output.error:
        return f"Command failed: {tool_output.error}."
    return "Command failed."


def command_markdown(tool_output: ToolOutput) -> str:
    result = tool_output.data if isinstance(tool_output.data, CommandResult) else None
    status = "✅ Success" if tool_output.success else "❌ Failed"
    lines = ["### Command Execution Results", f"**Status:** {status}"]
    if tool_output.error:
        lines.append(f"**Error:** {tool_output.error}")
    if result is not None:
        lines.append(f"**Exit code:** {result.exit_code}")
    lines += ["", "**Stdout:**", "```bash", (result.stdout if result and result.stdout else "(empty)"), "```"]
    if result is not None and result.stderr:
        lines += ["", "**Stderr:**", "```bash", result.stderr, "```"]
    return "\n".join(lines) + "\n"


def synthesize_response(
    classification: Classification | None,
    tool_output: ToolOutput | None,
    current_plan: ResponsePlan | None,
) -> ResponsePlan:
    """Build the final plan for a turn.

    Command turns are rendered from ``tool_output``. Every other turn keeps the
    plan a reasoning node already produced; a turn that skipped reasoning gets
    the canned greeting.
    """
    if classification == Classification.COMMAND and tool_output is not None:
        return ResponsePlan(
            voice=command_voice(tool_output),
            screen=ScreenPlan(action="markdown_response", payload={"content": command_markdown(tool_output)}),
        )
    if current_plan is not None:
        return current_plan
    return greeting_plan()
