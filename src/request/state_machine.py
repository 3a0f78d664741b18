"""Pipeline run state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class PipelineState(Enum):
    """Pipeline run states.

    State transitions:
        STARTED -> RESOLVING_PREREQUISITES: Run the request's preparation step
        RESOLVING_PREREQUISITES -> CACHE_LOOKUP: Cache reads are allowed
        RESOLVING_PREREQUISITES -> SENDING: Cache reads are bypassed
        CACHE_LOOKUP -> CACHE_HIT: A stored response was found
        CACHE_LOOKUP -> SENDING: Nothing stored under the fingerprint
        CACHE_HIT/SENDING -> DECODING: Parse the response body
        DECODING -> POST_PROCESSING: Hand the parsed value to the request
        POST_PROCESSING -> CACHE_WRITE: Fresh response and cache writes allowed
        POST_PROCESSING/CACHE_WRITE -> DONE: Value returned to the caller
        any non-terminal -> INTERCEPTING: A stage failed
        INTERCEPTING -> DONE: The interception hook recovered a value
        INTERCEPTING -> REJECTED: The failure reaches the caller
    """

    STARTED = auto()
    RESOLVING_PREREQUISITES = auto()
    CACHE_LOOKUP = auto()
    CACHE_HIT = auto()
    SENDING = auto()
    DECODING = auto()
    POST_PROCESSING = auto()
    CACHE_WRITE = auto()
    INTERCEPTING = auto()
    DONE = auto()
    REJECTED = auto()


class PipelineStateError(Exception):
    """Raised when an invalid pipeline state transition is attempted."""

    def __init__(self, from_state: PipelineState, to_state: PipelineState) -> None:
        """Record the rejected move.

        Args:
            from_state: State the run was in.
            to_state: State the run tried to enter.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid pipeline state transition: {from_state.name} -> {to_state.name}"
        )


class PipelineStateMachine:
    """State machine for a single pipeline run.

    Enforces the stage ordering of a run and logs every transition.
    """

    VALID_TRANSITIONS: ClassVar[dict[PipelineState, set[PipelineState]]] = {
        PipelineState.STARTED: {
            PipelineState.RESOLVING_PREREQUISITES,
            PipelineState.INTERCEPTING,
        },
        PipelineState.RESOLVING_PREREQUISITES: {
            PipelineState.CACHE_LOOKUP,
            PipelineState.SENDING,
            PipelineState.INTERCEPTING,
        },
        PipelineState.CACHE_LOOKUP: {
            PipelineState.CACHE_HIT,
            PipelineState.SENDING,
            PipelineState.INTERCEPTING,
        },
        PipelineState.CACHE_HIT: {
            PipelineState.DECODING,
            PipelineState.INTERCEPTING,
        },
        PipelineState.SENDING: {
            PipelineState.DECODING,
            PipelineState.INTERCEPTING,
        },
        PipelineState.DECODING: {
            PipelineState.POST_PROCESSING,
            PipelineState.INTERCEPTING,
        },
        PipelineState.POST_PROCESSING: {
            PipelineState.CACHE_WRITE,
            PipelineState.DONE,
            PipelineState.INTERCEPTING,
        },
        PipelineState.CACHE_WRITE: {
            PipelineState.DONE,
            PipelineState.INTERCEPTING,
        },
        PipelineState.INTERCEPTING: {
            PipelineState.DONE,
            PipelineState.REJECTED,
        },
        PipelineState.DONE: set(),  # Terminal state
        PipelineState.REJECTED: set(),  # Terminal state
    }

    def __init__(self, request_type: str = "") -> None:
        """Initialize the state machine in STARTED state.

        Args:
            request_type: Name of the request type, for logging.
        """
        self._state = PipelineState.STARTED
        self._history: list[PipelineState] = [PipelineState.STARTED]
        self._log = logger.bind(component="pipeline", request_type=request_type)

    @property
    def state(self) -> PipelineState:
        """Stage the run is currently in."""
        return self._state

    @property
    def history(self) -> list[PipelineState]:
        """Every stage visited so far, oldest first."""
        return list(self._history)

    def can_transition(self, to_state: PipelineState) -> bool:
        """Whether the run may move to ``to_state`` next.

        Args:
            to_state: Candidate next stage.

        Returns:
            True when the table allows the move.
        """
        return to_state in self.VALID_TRANSITIONS[self._state]

    def transition(self, to_state: PipelineState) -> None:
        """Move the run to the next stage.

        Args:
            to_state: Candidate next stage.

        Raises:
            PipelineStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "pipeline_state_rejected",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise PipelineStateError(self._state, to_state)

        previous = self._state
        self._state = to_state
        self._history.append(to_state)
        self._log.debug(
            "pipeline_state_transition",
            from_state=previous.name,
            to_state=to_state.name,
        )

    def is_terminal(self) -> bool:
        """Whether the run has finished, successfully or not."""
        return self._state in (PipelineState.DONE, PipelineState.REJECTED)

    def visited(self, state: PipelineState) -> bool:
        """Check whether the run passed through a state."""
        return state in self._history
