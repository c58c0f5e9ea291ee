"""
Debounced, single-flight completion triggering.

This module provides ``TriggerController``, which decides when an edit turns
into a completion request and runs that request against the context
assembler, the completion cache and the backend.

Each document has a ``TriggerSession`` moving through four states:

    IDLE -> SCHEDULED -> IN_FLIGHT -> (IDLE | CANCELLED -> IDLE)

- A qualifying edit arms a debounce timer. A newer edit replaces the pending
  request; the replaced caller receives None.
- When the timer fires the request goes in flight, unless another request
  for the same document is already in flight, in which case it is refused
  and its caller receives None.
- In-flight work checks the request's ``CancellationToken`` before every
  step and before returning, so a cancelled request always yields None.
- The in-flight handle is released in a ``finally`` block; every path
  returns the session to IDLE.

Classes:
    TriggerState: Session states
    CancellationToken: Cooperative cancellation flag
    CompletionRequest: One scheduled request
    TriggerSession: Per-document state and counters
    TriggerController: The scheduler

Example:
    >>> controller = TriggerController(assembler, cache, backend)
    >>> text = await controller.request_completion(document, CursorPosition(3, 16))
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from ..cache.completion_cache import CompletionCache
from ..context.assembler import ContextAssembler
from ..context.formatting import format_for_prompt
from ..core.config import AssistConfig
from ..core.types import CursorPosition
from ..utils.error_handling import BackendError, ErrorCollector
from ..utils.logging_config import AssistLogger, get_logger
from ..workspace.protocols import CompletionBackend, EditorDocument
from .postprocess import post_process_completion
from .prompt import build_completion_prompt
from .triggers import should_trigger


class TriggerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"
    CANCELLED = "cancelled"


class CancellationToken:
    """A flag that can be raised once and never lowered."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


@dataclass(slots=True)
class CompletionRequest:
    document: EditorDocument
    position: CursorPosition
    token: CancellationToken
    future: asyncio.Future


@dataclass(slots=True)
class TriggerSession:
    """Trigger state for one document."""

    uri: Path
    state: TriggerState = TriggerState.IDLE
    timer: asyncio.TimerHandle | None = None
    pending: CompletionRequest | None = None
    in_flight: asyncio.Task | None = None
    active: CompletionRequest | None = None
    last_outcome: str | None = None
    history: deque[TriggerState] = field(default_factory=lambda: deque(maxlen=64))

    # Counters
    scheduled: int = 0
    fired: int = 0
    refused: int = 0
    cancelled: int = 0
    completed: int = 0

    @property
    def is_in_flight(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()


class TriggerController:
    """
    Schedules and runs completion requests.

    The controller must be used from a single running event loop.
    """

    def __init__(
        self,
        assembler: ContextAssembler,
        cache: CompletionCache,
        backend: CompletionBackend,
        config: AssistConfig | None = None,
        logger: AssistLogger | None = None,
        provider: str | None = None,
    ) -> None:
        self.assembler = assembler
        self.cache = cache
        self.backend = backend
        self.config = config or AssistConfig()
        self.logger = logger or get_logger()
        self.provider = provider
        self._sessions: dict[Path, TriggerSession] = {}
        self.errors = ErrorCollector()

    # Public API

    async def request_completion(
        self,
        document: EditorDocument,
        position: CursorPosition,
        token: CancellationToken | None = None,
    ) -> str | None:
        """
        Request a completion for an edit at ``position``.

        Returns the completion text, or None when the edit does not qualify,
        the request was superseded, refused, cancelled or failed, or the
        response contained no code.
        """
        if not 0 <= position.line < document.line_count:
            return None
        if not should_trigger(document.line_at(position.line), position.character, document.language_id):
            return None

        session = self.session(document.uri)
        loop = asyncio.get_running_loop()

        self._drop_pending(session)

        request = CompletionRequest(
            document=replace(document),
            position=replace(position),
            token=token or CancellationToken(),
            future=loop.create_future(),
        )
        request.future.add_done_callback(
            lambda fut, tok=request.token: tok.cancel() if fut.cancelled() else None
        )
        session.pending = request
        session.timer = loop.call_later(self.config.debounce_ms / 1000.0, self._fire, session)
        session.scheduled += 1
        self._transition(session, TriggerState.SCHEDULED)

        return await request.future

    def session(self, uri: Path) -> TriggerSession:
        """The session for ``uri``, created on first use."""
        session = self._sessions.get(uri)
        if session is None:
            session = TriggerSession(uri=uri)
            self._sessions[uri] = session
        return session

    def state_of(self, uri: Path) -> TriggerState:
        session = self._sessions.get(uri)
        return session.state if session is not None else TriggerState.IDLE

    def cancel(self, uri: Path) -> None:
        """Cancel the pending and the in-flight request for ``uri``."""
        session = self._sessions.get(uri)
        if session is None:
            return
        if session.pending is not None:
            session.pending.token.cancel()
            session.cancelled += 1
        self._drop_pending(session)
        if session.active is not None:
            session.active.token.cancel()
        if not session.is_in_flight:
            self._transition(session, TriggerState.IDLE)

    def close_session(self, uri: Path) -> None:
        """Cancel any work for a closed document and forget its session."""
        self.cancel(uri)
        self._sessions.pop(uri, None)

    def dispose(self) -> None:
        """Cancel every timer and request, and forget all sessions."""
        for uri in list(self._sessions):
            self.cancel(uri)
        self._sessions.clear()

    # Scheduling

    def _drop_pending(self, session: TriggerSession) -> None:
        if session.timer is not None:
            session.timer.cancel()
            session.timer = None
        pending = session.pending
        session.pending = None
        if pending is not None and not pending.future.done():
            pending.future.set_result(None)

    def _fire(self, session: TriggerSession) -> None:
        session.timer = None
        request = session.pending
        session.pending = None
        if request is None:
            return

        if request.future.done() or request.token.is_cancelled:
            if not request.future.done():
                request.future.set_result(None)
            session.cancelled += 1
            self._settle(session)
            return

        if session.is_in_flight:
            session.refused += 1
            request.future.set_result(None)
            self.logger.log_completion_request(str(session.uri), "refused", 0.0)
            self._transition(session, TriggerState.IN_FLIGHT)
            return

        session.fired += 1
        session.active = request
        self._transition(session, TriggerState.IN_FLIGHT)
        session.in_flight = asyncio.get_running_loop().create_task(self._run(session, request))

    def _settle(self, session: TriggerSession) -> None:
        if session.is_in_flight:
            self._transition(session, TriggerState.IN_FLIGHT)
        elif session.pending is not None:
            self._transition(session, TriggerState.SCHEDULED)
        else:
            self._transition(session, TriggerState.IDLE)

    def _transition(self, session: TriggerSession, state: TriggerState) -> None:
        if session.state != state:
            self.logger.debug(
                f"Trigger session {session.uri}: {session.state.value} -> {state.value}",
                uri=str(session.uri),
                state=state.value,
            )
        session.state = state
        session.history.append(state)

    # In-flight work

    async def _run(self, session: TriggerSession, request: CompletionRequest) -> None:
        start = time.perf_counter()
        result: str | None = None
        outcome = "error"
        try:
            result, outcome = await self._produce(request)
        except Exception as e:
            self.logger.error(f"Completion request failed for {session.uri}: {e}")
        finally:
            session.in_flight = None
            session.active = None
            if outcome == "cancelled":
                result = None
                session.cancelled += 1
                self._transition(session, TriggerState.CANCELLED)
            else:
                session.completed += 1
            session.last_outcome = outcome
            self._settle(session)
            if not request.future.done():
                request.future.set_result(result)
            self.logger.log_completion_request(
                str(session.uri), outcome, (time.perf_counter() - start) * 1000.0
            )

    async def _produce(self, request: CompletionRequest) -> tuple[str | None, str]:
        token = request.token
        document = request.document
        position = request.position
        if token.is_cancelled:
            return None, "cancelled"

        context = await self.assembler.build_context(document)
        if token.is_cancelled:
            return None, "cancelled"

        prompt = build_completion_prompt(
            document,
            position,
            format_for_prompt(context, inline_content_limit=self.config.inline_content_limit),
            preceding=self.config.preceding_lines,
            following=self.config.following_lines,
        )
        current_line = document.line_at(position.line)

        cached = self.cache.get_cached_completion(prompt)
        if cached is not None:
            return (None, "cancelled") if token.is_cancelled else (cached, "cache_hit")

        raw: str | None = None
        if self.provider is not None:
            raw = self.cache.get_cached_provider_response(self.provider, prompt)
        from_provider_cache = raw is not None

        if raw is None:
            try:
                raw = await self.backend.complete(prompt)
            except Exception as e:
                error = BackendError(f"Completion backend failed: {e}", self.provider)
                self.errors.add_error(error, context={"uri": str(document.uri)})
                self.logger.warning(error.message, uri=str(document.uri), provider=self.provider)
                return None, "backend_error"
            if token.is_cancelled:
                return None, "cancelled"
            if self.provider is not None and raw:
                self.cache.cache_provider_response(self.provider, prompt, raw)

        completion = post_process_completion(raw, current_line, self.config.max_completion_lines)
        if not completion:
            return None, "empty"

        self.cache.cache_completion(prompt, completion)
        if token.is_cancelled:
            return None, "cancelled"
        return completion, "provider_cache_hit" if from_provider_cache else "completed"
