"""Request execution pipeline.

Runs one ``ApiRequest`` through a fixed sequence of stages::

    prerequisites -> cache lookup -> transport -> decode
        -> post-process -> conditional cache write

Any stage failure is funnelled through the request type's ``otherwise``
hook, the single point allowed to turn a failure into a success. Cache
store failures are the exception: they are infrastructure faults and
propagate to the caller untouched.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog

from src.cache import CachePort, compute_fingerprint
from src.envelope import ResponseEnvelope
from src.errors import ApiRequestError, PrerequisiteError
from src.logfile import LoggerPort, NoLogArtifactError
from src.observability import (
    PipelineMetrics,
    bind_request_context,
    clear_request_context,
)
from src.request.descriptor import ApiRequest
from src.request.models import PipelineResult, PipelineRun
from src.request.state_machine import PipelineState, PipelineStateMachine
from src.settings import ApiRequestSettings
from src.transport import PreparedRequest, TransportPort


logger = structlog.get_logger()

T = TypeVar("T")


class _CacheStoreFailure(Exception):
    """Carries a cache store error past the interception hook."""

    def __init__(self, error: Exception) -> None:
        super().__init__(str(error))
        self.error = error


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class RequestPipeline:
    """Executes API requests with caching, logging and failure interception.

    Holds no per-run state: concurrent runs of distinct requests only share
    the cache and logger, which bring their own concurrency discipline.
    Concurrent identical requests each reach the transport; the last cache
    write wins.
    """

    def __init__(
        self,
        cache: CachePort,
        transport: TransportPort,
        log_file: LoggerPort,
        settings: ApiRequestSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cache: Tagged key/value store for responses.
            transport: Sends prepared requests.
            log_file: Persists request/outcome artifacts.
            settings: Process-wide configuration (cache key seed, ...).
            clock: Source of the current time, defaults to UTC now.
        """
        self._cache = cache
        self._transport = transport
        self._log_file = log_file
        self._settings = settings or ApiRequestSettings()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._log = logger.bind(component="pipeline")

    @property
    def settings(self) -> ApiRequestSettings:
        """Get the pipeline configuration."""
        return self._settings

    # ===== Public API =====

    async def execute(self, request: ApiRequest) -> PipelineResult:
        """Run a request through every stage.

        Args:
            request: The request to execute; its prerequisites may mutate it.

        Returns:
            The value and the state of the run.

        Raises:
            Exception: Whatever the ``otherwise`` hook raises (by default,
                the failure of the stage that failed), or a cache store error.
        """
        run = PipelineRun(state=PipelineStateMachine(request.request_type.name))
        request.last_run = run
        try:
            value = await self._run_stages(request, run)
        except _CacheStoreFailure as failure:
            raise failure.error from None
        except Exception as error:  # noqa: BLE001
            value = await self._intercept(request, run, error)
        finally:
            clear_request_context()
        return PipelineResult(value=value, run=run)

    async def send(self, request: ApiRequest) -> Any:
        """Run a request and return only its (post-processed) value."""
        result = await self.execute(request)
        return result.value

    def send_sync(self, request: ApiRequest) -> Any:
        """Blocking variant of ``send`` for code outside an event loop."""
        return asyncio.run(self.send(request))

    def fingerprint(self, request: ApiRequest) -> str:
        """Cache key of a request in its current state."""
        return self._fingerprint_prepared(request, request.prepare())

    async def purge(self, request: ApiRequest) -> None:
        """Drop the cached response of a request; absent entries are fine."""
        removed = await self._cache.forget(self.fingerprint(request), request.cache_tags)
        self._log.info(
            "cache_purged",
            request_type=request.request_type.name,
            removed=removed,
        )

    async def can_be_fulfilled_by_cache(self, request: ApiRequest) -> bool:
        """Whether a live cached response exists for a request."""
        return await self._cache.has(self.fingerprint(request), request.cache_tags)

    def last_log_contents(self, request: ApiRequest) -> str:
        """Contents of the latest artifact logged for this request instance.

        Raises:
            NoLogArtifactError: If the instance has never logged (never sent,
                or logging disabled).
        """
        if not request.sent_logs:
            raise NoLogArtifactError("No log files have been saved by this instance.")
        folder = request.request_type.hooks.log_folder(request)
        return self._log_file.read(folder, request.sent_logs[-1])

    # ===== Stages =====

    async def _run_stages(self, request: ApiRequest, run: PipelineRun) -> Any:
        machine = run.state
        hooks = request.request_type.hooks

        machine.transition(PipelineState.RESOLVING_PREREQUISITES)
        await self._resolve_prerequisites(request)

        # Prerequisites may have changed the URL and body: snapshot once and
        # use the same snapshot for the fingerprint and the send.
        prepared = request.prepare()
        run.fingerprint = self._fingerprint_prepared(request, prepared)
        bind_request_context(request.request_type.name, run.fingerprint)
        log = self._log.bind(
            request_type=request.request_type.name, fingerprint=run.fingerprint
        )

        if request.cache_policy.read:
            machine.transition(PipelineState.CACHE_LOOKUP)
            cached = await self._guard_cache(
                self._cache.get(run.fingerprint, request.cache_tags)
            )
            if cached is not None:
                machine.transition(PipelineState.CACHE_HIT)
                run.response = ResponseEnvelope.from_cache_tuple(cached)
                run.from_cache = True
                PipelineMetrics.get_instance().record_cache_hit()
                log.info("cache_hit", status_code=run.response.status_code)

        if not run.from_cache:
            machine.transition(PipelineState.SENDING)
            run.response = await self._send(request, run, prepared)

        machine.transition(PipelineState.DECODING)
        parsed = request.request_type.decoder.decode(run.response.body, request)

        machine.transition(PipelineState.POST_PROCESSING)
        value = await _resolve(hooks.post_process(request, parsed))

        # Re-caching a value just read from cache would only refresh its TTL
        if request.cache_policy.write and not run.from_cache:
            machine.transition(PipelineState.CACHE_WRITE)
            await self._write_cache(request, run)

        machine.transition(PipelineState.DONE)
        log.debug("request_complete", from_cache=run.from_cache)
        return value

    async def _resolve_prerequisites(self, request: ApiRequest) -> None:
        try:
            await request.request_type.hooks.prerequisites(request)
        except ApiRequestError:
            raise
        except Exception as e:  # noqa: BLE001
            raise PrerequisiteError(
                f"Prerequisites for {request.friendly_name} failed: {e}"
            ) from e

    async def _send(
        self,
        request: ApiRequest,
        run: PipelineRun,
        prepared: PreparedRequest,
    ) -> ResponseEnvelope:
        # Resolved before the send so a missing log_folder hook fails
        # without any network activity.
        folder = (
            request.request_type.hooks.log_folder(request)
            if request.cache_policy.log
            else None
        )

        try:
            response = await self._transport.send(prepared, request.transport_options)
        except Exception as error:
            if isinstance(error, ApiRequestError) and error.response is not None:
                run.response = error.response
                PipelineMetrics.get_instance().record_response(error.response.status_code)
            self._write_log(request, run, folder, prepared, error)
            raise

        PipelineMetrics.get_instance().record_response(response.status_code)
        self._write_log(request, run, folder, prepared, response)
        return response

    async def _write_cache(self, request: ApiRequest, run: PipelineRun) -> None:
        if run.response is None or run.fingerprint is None:
            return
        expires_at = request.request_type.hooks.cache_expires_at(
            request, self._clock()
        )
        await self._guard_cache(
            self._cache.put(
                run.fingerprint,
                request.cache_tags,
                run.response.to_cache_tuple(),
                expires_at,
            )
        )
        PipelineMetrics.get_instance().record_cache_write()
        self._log.debug(
            "cache_write",
            request_type=request.request_type.name,
            fingerprint=run.fingerprint,
            expires_at=expires_at.isoformat() if expires_at else None,
        )

    async def _intercept(
        self, request: ApiRequest, run: PipelineRun, error: Exception
    ) -> Any:
        failed_in = run.state.state
        run.state.transition(PipelineState.INTERCEPTING)
        PipelineMetrics.get_instance().record_failure(getattr(error, "fault_kind", None))
        self._log.warning(
            "request_failed",
            request_type=request.request_type.name,
            failed_in=failed_in.name,
            error_type=type(error).__name__,
            error=str(error),
            fault_kind=(
                error.fault_kind.value if isinstance(error, ApiRequestError) else None
            ),
        )

        try:
            value = await _resolve(request.request_type.hooks.otherwise(request, error))
        except Exception:
            run.state.transition(PipelineState.REJECTED)
            raise

        run.state.transition(PipelineState.DONE)
        PipelineMetrics.get_instance().record_recovery()
        self._log.info(
            "request_recovered",
            request_type=request.request_type.name,
            error_type=type(error).__name__,
        )
        return value

    # ===== Helpers =====

    def _fingerprint_prepared(
        self, request: ApiRequest, prepared: PreparedRequest
    ) -> str:
        return compute_fingerprint(
            request.request_type.name,
            prepared.url,
            prepared.body,
            self._settings.cache_key_seed,
        )

    async def _guard_cache(self, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except Exception as e:
            raise _CacheStoreFailure(e) from e

    def _write_log(
        self,
        request: ApiRequest,
        run: PipelineRun,
        folder: str | None,
        prepared: PreparedRequest,
        outcome: object,
    ) -> None:
        if folder is None:
            return
        try:
            artifact = self._log_file.write(folder, [prepared, outcome])
        except Exception as e:  # noqa: BLE001
            self._log.warning("log_write_failed", folder=folder, error=str(e))
            artifact = None

        if artifact is None:
            PipelineMetrics.get_instance().record_log_write_failure()
            return
        run.sent_logs.append(artifact)
        request.sent_logs.append(artifact)
