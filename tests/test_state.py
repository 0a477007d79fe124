import pytest

from dualtrack.core.state import (
    ChatMessage,
    Classification,
    ResponsePlan,
    ScreenPlan,
    TextMessage,
    TurnState,
    VoiceUtterance,
    apply_update,
)
from dualtrack.errors import GraphError


def test_history_updates_append() -> None:
    state = TurnState(history=[ChatMessage(role="user", content="m1")])

    state = apply_update(state, {"history": [ChatMessage(role="assistant", content="m2")]})

    assert [item.content for item in state.history] == ["m1", "m2"]


def test_scalar_updates_replace() -> None:
    state = TurnState(classification=Classification.COMMAND)

    state = apply_update(state, {"classification": Classification.CHITCHAT})

    assert state.classification == Classification.CHITCHAT


def test_none_update_keeps_current_value() -> None:
    plan = ResponsePlan(voice="hi", screen=ScreenPlan(action="none"))
    state = TurnState(response_plan=plan)

    state = apply_update(state, {"response_plan": None})

    assert state.response_plan == plan


def test_apply_update_does_not_mutate_input() -> None:
    original = TurnState()

    updated = apply_update(original, {"classification": Classification.CODE_QUERY})

    assert original.classification is None
    assert updated.classification == Classification.CODE_QUERY


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(GraphError):
        apply_update(TurnState(), {"mood": "happy"})


def test_turn_state_accepts_camel_case_wire_names() -> None:
    state = TurnState.model_validate(
        {
            "userIntent": {
                "type": "USER_MESSAGE",
                "text": "Explain the auth flow",
                "context": {"activeFile": "src/auth.ts"},
                "pr": {"title": "Add auth", "description": "JWT support"},
            }
        }
    )

    assert isinstance(state.user_intent, TextMessage)
    assert state.user_intent.context is not None
    assert state.user_intent.context.active_file == "src/auth.ts"
    assert state.user_intent.pr is not None
    assert state.user_intent.pr.title == "Add auth"


def test_intent_union_is_discriminated_by_type() -> None:
    state = TurnState.model_validate({"userIntent": {"type": "VOICE_INPUT", "text": "hey"}})

    assert isinstance(state.user_intent, VoiceUtterance)


def test_dump_by_alias_uses_camel_case() -> None:
    dumped = TurnState(classification=Classification.COMMAND).model_dump(by_alias=True)

    assert "userIntent" in dumped
    assert "responsePlan" in dumped
    assert dumped["classification"] == Classification.COMMAND
