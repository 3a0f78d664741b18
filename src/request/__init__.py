"""Request types, hooks and the pipeline that executes them."""

from src.request.descriptor import ApiRequest, RequestType, UrlBuilder
from src.request.hooks import DEFAULT_CACHE_TTL, RequestHooks
from src.request.models import CachePolicy, PipelineResult, PipelineRun
from src.request.naming import friendly_name
from src.request.pipeline import RequestPipeline
from src.request.state_machine import (
    PipelineState,
    PipelineStateError,
    PipelineStateMachine,
)
from src.request.url import build_url
from src.request.wiring import open_pipeline


__all__ = [
    "DEFAULT_CACHE_TTL",
    "ApiRequest",
    "CachePolicy",
    "PipelineResult",
    "PipelineRun",
    "PipelineState",
    "PipelineStateError",
    "PipelineStateMachine",
    "RequestHooks",
    "RequestPipeline",
    "RequestType",
    "UrlBuilder",
    "build_url",
    "friendly_name",
    "open_pipeline",
]
