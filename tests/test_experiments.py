import pytest

from taskpick.config import ConfigurationError
from taskpick.experiments import (
    EXPERIMENT_REGISTRY,
    RAW_TERMINAL_RUNNER,
    STATIC_RECIPES,
    ExperimentGate,
    ExperimentSession,
)


def test_retired_experiment_fails_even_with_active_ones() -> None:
    gate = ExperimentGate(
        ["example-active", "example-retired", RAW_TERMINAL_RUNNER], ExperimentSession()
    )

    with pytest.raises(ConfigurationError, match="example-retired"):
        gate.validate()


def test_unknown_experiment_fails() -> None:
    gate = ExperimentGate(["not-a-real-flag"], ExperimentSession())

    with pytest.raises(ConfigurationError, match="not-a-real-flag"):
        gate.validate()
    assert gate.status("not-a-real-flag") == "unknown"


def test_deprecated_warning_is_suppressed_for_rest_of_session() -> None:
    session = ExperimentSession()
    prompts: list[str] = []
    events: list[dict] = []

    def confirm(message: str) -> bool:
        prompts.append(message)
        return True

    gate = ExperimentGate(
        ["example-deprecated"], session, confirm=confirm, event_hook=events.append
    )
    gate.validate()
    gate.validate()

    assert len(prompts) == 1
    assert "example-deprecated" in prompts[0]
    assert session.deprecation_warnings_suppressed is True
    assert [event["event"] for event in events] == [
        "experiment_deprecated",
        "experiment_warning_suppressed",
    ]

    other_gate = ExperimentGate([STATIC_RECIPES], session, confirm=confirm)
    other_gate.validate()
    assert len(prompts) == 1


def test_declined_suppression_warns_again() -> None:
    session = ExperimentSession()
    prompts: list[str] = []

    def confirm(message: str) -> bool:
        prompts.append(message)
        return False

    gate = ExperimentGate(["example-deprecated"], session, confirm=confirm)
    gate.validate()
    gate.validate()

    assert len(prompts) == 2
    assert session.deprecation_warnings_suppressed is False


def test_fresh_session_warns_again() -> None:
    prompts: list[str] = []
    first = ExperimentGate(["example-deprecated"], ExperimentSession(), confirm=lambda m: True)
    first.validate()

    second = ExperimentGate(
        ["example-deprecated"],
        ExperimentSession(),
        confirm=lambda message: prompts.append(message) or True,
    )
    second.validate()

    assert len(prompts) == 1


def test_is_enabled_requires_configuration_and_usable_status() -> None:
    gate = ExperimentGate([STATIC_RECIPES, "example-retired"], ExperimentSession())

    assert gate.is_enabled(STATIC_RECIPES) is True
    assert gate.is_enabled(RAW_TERMINAL_RUNNER) is False
    assert gate.is_enabled("example-retired") is False
    assert EXPERIMENT_REGISTRY[STATIC_RECIPES] == "deprecated"
