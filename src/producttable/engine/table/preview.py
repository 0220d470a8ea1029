import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set

from pydantic import BaseModel

from .errors import TableEngineError
from .normalizer import normalize
from .orchestrator import TableOrchestrator
from .output import RenderMode, RenderParams, RenderedOutput

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.4

# ============================================================================
# 1. 状态机 (State machine)
# ============================================================================

class PreviewState(str, enum.Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    CANCELED = "canceled"

BUSY_STATES = {PreviewState.DEBOUNCING, PreviewState.RESOLVING, PreviewState.RENDERING}

# RESOLVING/RENDERING -> IDLE covers both delivery and per-cycle failure
TRANSITIONS: Dict[PreviewState, Set[PreviewState]] = {
    PreviewState.IDLE: {PreviewState.DEBOUNCING},
    PreviewState.DEBOUNCING: {PreviewState.RESOLVING, PreviewState.CANCELED},
    PreviewState.RESOLVING: {PreviewState.RENDERING, PreviewState.CANCELED, PreviewState.IDLE},
    PreviewState.RENDERING: {PreviewState.IDLE, PreviewState.CANCELED},
    PreviewState.CANCELED: {PreviewState.DEBOUNCING},
}

class InvalidPreviewTransition(TableEngineError):
    def __init__(self, from_state: PreviewState, to_state: PreviewState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Cannot transition preview from '{from_state.value}' to '{to_state.value}'.")

# ============================================================================
# 2. 周期结果 (Cycle outcome)
# ============================================================================

class PreviewFailure(BaseModel):
    code: str
    message: str
    field: Optional[str] = None

class PreviewOutcome(BaseModel):
    seq: int
    output: Optional[RenderedOutput] = None
    error: Optional[PreviewFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

ResultCallback = Callable[[PreviewOutcome], Awaitable[None]]

# ============================================================================
# 3. 会话 (Session)
# ============================================================================

class PreviewSession:
    """
    One live-preview session per editor. Every edit restarts the debounce window;
    an in-flight cycle is cancelled when superseded and only the latest sequence is delivered.
    """
    def __init__(
        self,
        orchestrator: TableOrchestrator,
        on_result: ResultCallback,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.orchestrator = orchestrator
        self.on_result = on_result
        self.debounce_seconds = debounce_seconds

        self._state = PreviewState.IDLE
        self._seq = 0
        self._task: Optional[asyncio.Task] = None
        self.history: List[PreviewState] = [PreviewState.IDLE]

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def seq(self) -> int:
        return self._seq

    def _transition(self, to_state: PreviewState) -> None:
        if to_state not in TRANSITIONS[self._state]:
            raise InvalidPreviewTransition(self._state, to_state)
        logger.debug(f"Preview session: {self._state.value} -> {to_state.value}")
        self._state = to_state
        self.history.append(to_state)

    # --- 公共接口 ---

    def submit(self, raw_definition: Mapping[str, Any], params: Optional[RenderParams] = None) -> int:
        """Registers an edit and (re)starts the debounce window. Returns the edit's sequence number."""
        self._seq += 1
        seq = self._seq

        if self._state in BUSY_STATES:
            if self._task and not self._task.done():
                self._task.cancel()
            self._transition(PreviewState.CANCELED)
        self._transition(PreviewState.DEBOUNCING)

        self._task = asyncio.create_task(self._run_cycle(seq, raw_definition, params or RenderParams()))
        return seq

    async def wait(self) -> None:
        """Waits until the current cycle (if any) has finished or been cancelled."""
        task = self._task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def close(self) -> None:
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._task = None
        self._state = PreviewState.IDLE

    # --- 内部周期 ---

    def _is_latest(self, seq: int) -> bool:
        return seq == self._seq

    async def _run_cycle(self, seq: int, raw_definition: Mapping[str, Any], params: RenderParams) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
            if not self._is_latest(seq):
                return
            self._transition(PreviewState.RESOLVING)

            definition = normalize(raw_definition)
            resolved = await self.orchestrator.resolve(definition, params)
            if not self._is_latest(seq):
                return

            self._transition(PreviewState.RENDERING)
            output = self.orchestrator.render(resolved, RenderMode.PREVIEW)
            if not self._is_latest(seq):
                return

            self._transition(PreviewState.IDLE)

        except asyncio.CancelledError:
            logger.debug(f"Preview cycle {seq} cancelled.")
            raise
        except TableEngineError as e:
            await self._fail(seq, PreviewFailure(
                code=type(e).__name__, message=e.message, field=getattr(e, "field", None)
            ))
            return
        except Exception as e:
            logger.error(f"Preview cycle {seq} failed unexpectedly: {e}", exc_info=True)
            await self._fail(seq, PreviewFailure(code="InternalError", message="Preview rendering failed."))
            return

        await self._deliver(PreviewOutcome(seq=seq, output=output))

    async def _fail(self, seq: int, failure: PreviewFailure) -> None:
        if not self._is_latest(seq):
            return
        if self._state != PreviewState.IDLE:
            self._transition(PreviewState.IDLE)
        await self._deliver(PreviewOutcome(seq=seq, error=failure))

    async def _deliver(self, outcome: PreviewOutcome) -> None:
        # 每个 seq 至多投递一次; 回调异常只记录
        try:
            await self.on_result(outcome)
        except Exception as e:
            logger.error(f"Delivering preview cycle {outcome.seq} failed: {e}", exc_info=True)
