"""UI state machine: input -> processing -> results.

Each step is its own state class carrying only the fields valid in it, so a
plan can only be reached through ResultsState and an error only through
InputState.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Literal, Union

from .errors import StateTransitionError
from .main import generate_business_plan, validate_request
from .models import BusinessPlan, Language, LogCallback, LogEntry

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Failed to generate plan. Please ensure your API key is valid and try again."


@dataclass(frozen=True)
class InputState:
    error: str | None = None
    logs: list[LogEntry] = field(default_factory=list)
    step: Literal["input"] = "input"


@dataclass(frozen=True)
class ProcessingState:
    logs: list[LogEntry] = field(default_factory=list)
    step: Literal["processing"] = "processing"


@dataclass(frozen=True)
class ResultsState:
    plan: BusinessPlan
    logs: list[LogEntry] = field(default_factory=list)
    step: Literal["results"] = "results"


AppState = Union[InputState, ProcessingState, ResultsState]


class PlanSession:
    """
    Drives one user's flow through the pipeline.

    Args:
        generate: Pipeline callable(location, niche, language, on_log) -> BusinessPlan,
            run in a worker thread
        on_log: Optional callback(LogEntry) for live progress (called from the worker thread)
        on_change: Optional callback(AppState) after every transition
    """

    def __init__(
        self,
        generate: Callable[..., BusinessPlan] = generate_business_plan,
        on_log: LogCallback | None = None,
        on_change: Callable[[AppState], None] | None = None,
        language: Language = "en",
    ):
        self.generate = generate
        self.on_log = on_log
        self.on_change = on_change
        self.language = language
        self.state: AppState = InputState()

    @property
    def step(self) -> str:
        return self.state.step

    def _transition(self, state: AppState) -> None:
        self.state = state
        if self.on_change:
            self.on_change(state)

    async def submit(self, location: str, niche: str, language: Language) -> AppState:
        """
        Run the pipeline for the given inputs and return the terminal state.

        Raises:
            StateTransitionError: not in the input step (a run is in flight or a plan is shown)
            ValueError: invalid inputs; the state is left untouched
        """
        if not isinstance(self.state, InputState):
            raise StateTransitionError(f"Cannot submit while in {self.state.step!r} step")
        validate_request(location, niche, language)

        self.language = language
        processing = ProcessingState(logs=[])
        self._transition(processing)

        def _append(entry: LogEntry):
            processing.logs.append(entry)
            if self.on_log:
                self.on_log(entry)

        try:
            plan = await asyncio.to_thread(self.generate, location, niche, language, _append)
        except Exception:
            logger.exception("Plan generation failed for %r in %r", niche, location)
            self._transition(InputState(error=GENERIC_ERROR_MESSAGE, logs=processing.logs))
        else:
            self._transition(ResultsState(plan=plan, logs=processing.logs))

        return self.state

    def reset(self) -> AppState:
        """Back to a clean input step: no logs, no plan, no error."""
        if isinstance(self.state, ProcessingState):
            raise StateTransitionError("Cannot reset while a run is in flight")
        self._transition(InputState())
        return self.state

    def dismiss_error(self) -> AppState:
        if isinstance(self.state, InputState) and self.state.error is not None:
            self._transition(InputState(logs=self.state.logs))
        return self.state
