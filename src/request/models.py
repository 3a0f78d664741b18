"""Data models for a request and a single pipeline run."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.envelope import ResponseEnvelope
from src.request.state_machine import PipelineStateMachine


class CachePolicy(BaseModel):
    """Independent cache and logging switches of a request.

    Reading and writing are separate: a request may bypass the cache on the
    way in and still refresh it on the way out.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    read: bool = Field(default=True, description="May serve from cache")
    write: bool = Field(default=True, description="May write the response to cache")
    log: bool = Field(default=True, description="Should write a log artifact")


@dataclass
class PipelineRun:
    """State of one pipeline invocation.

    Created when the run starts and never persisted.

    Attributes:
        state: Lifecycle state machine of the run.
        fingerprint: Cache key, once prerequisites have resolved.
        from_cache: Whether the response was served from cache.
        response: Envelope produced by the cache or the transport, if any.
        sent_logs: Log artifact ids written during this run.
    """

    state: PipelineStateMachine = field(default_factory=PipelineStateMachine)
    fingerprint: str | None = None
    from_cache: bool = False
    response: ResponseEnvelope | None = None
    sent_logs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a successful (or recovered) pipeline run.

    Attributes:
        value: Post-processed value, or the interception hook's substitute.
        run: State of the run that produced it.
    """

    value: Any
    run: PipelineRun
