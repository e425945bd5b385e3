"""
Latest-wins adjustment scheduler.

Debounces rapid adjustment changes and renders them on a background
thread pool. Only the most recent request may be committed: a result
whose generation has been superseded while it was computing is dropped.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future, wait
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Any

from ..processing.adjustment_engine import AdjustmentEngine
from ..processing.models import AdjustmentVector, PixelBuffer

logger = logging.getLogger(__name__)

CommitCallback = Callable[[PixelBuffer, AdjustmentVector], Any]
ErrorCallback = Callable[[Exception, int], Any]


@dataclass(frozen=True)
class RenderRequest:
    """A pending render; ``generation`` orders requests."""
    generation: int
    source: PixelBuffer
    adjustments: AdjustmentVector


class AdjustmentScheduler:
    """
    Single-slot pending request cell with a generation counter.

    Each ``submit`` overwrites the slot and restarts the debounce timer.
    When the timer fires the slot is drained into the executor. On
    completion the result is committed only if its generation is still
    the newest; the check and the commit happen under one lock.
    """

    def __init__(self, engine: AdjustmentEngine, commit: CommitCallback,
                 debounce_seconds: float = 0.3, max_workers: int = 1,
                 on_error: Optional[ErrorCallback] = None):
        """
        Args:
            engine: Engine used for rendering
            commit: Called with (result, adjustments) for the newest render only
            debounce_seconds: Quiet period before a request is dispatched
            max_workers: Render thread pool size
            on_error: Called with (exception, generation) when a render or
                its commit fails
        """
        self.engine = engine
        self.commit = commit
        self.on_error = on_error
        self.debounce_seconds = debounce_seconds

        self.executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="EditSight-Render"
        )

        self._lock = threading.RLock()
        self._generation = 0
        self._pending: Optional[RenderRequest] = None
        self._timer: Optional[threading.Timer] = None
        self._futures: List[Future] = []
        self._shutdown = False

        self.last_error: Optional[Exception] = None
        self.stats = {
            'requests_submitted': 0,
            'renders_started': 0,
            'results_committed': 0,
            'stale_results_discarded': 0,
            'renders_failed': 0,
            'commits_failed': 0,
        }

    @classmethod
    def from_config(cls, engine: AdjustmentEngine, commit: CommitCallback,
                    config: dict, **kwargs) -> 'AdjustmentScheduler':
        scheduler_config = config.get('scheduler', {}) if config else {}
        return cls(
            engine,
            commit,
            debounce_seconds=scheduler_config.get('debounce_seconds', 0.3),
            max_workers=scheduler_config.get('max_workers', 1),
            **kwargs
        )

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, source: PixelBuffer, adjustments: AdjustmentVector) -> int:
        """
        Queue a render request, replacing any pending one.

        Returns:
            The request's generation number
        """
        with self._lock:
            if self._shutdown:
                raise RuntimeError("AdjustmentScheduler is shut down")

            self._generation += 1
            self._pending = RenderRequest(self._generation, source, adjustments)
            self.stats['requests_submitted'] += 1

            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            if self.debounce_seconds > 0:
                self._timer = threading.Timer(self.debounce_seconds, self._dispatch)
                self._timer.daemon = True
                self._timer.start()
            else:
                self._dispatch()

            return self._generation

    def flush(self) -> None:
        """Dispatch the pending request now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._dispatch()

    def _dispatch(self) -> None:
        with self._lock:
            request, self._pending = self._pending, None
            self._timer = None
            if request is None or self._shutdown:
                return

            self.stats['renders_started'] += 1
            future = self.executor.submit(self._render, request)
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)
            logger.debug(f"Dispatched render generation {request.generation}")

    def _render(self, request: RenderRequest) -> None:
        try:
            result = self.engine.apply(request.source, request.adjustments)
        except Exception as e:
            with self._lock:
                self.stats['renders_failed'] += 1
            self._report_error(e, request.generation, "Render")
            return

        with self._lock:
            if request.generation != self._generation:
                self.stats['stale_results_discarded'] += 1
                logger.debug(f"Discarded stale render generation {request.generation} "
                             f"(latest is {self._generation})")
                return

            try:
                self.commit(result, request.adjustments)
            except Exception as e:
                self.stats['commits_failed'] += 1
                error = e
            else:
                self.stats['results_committed'] += 1
                logger.debug(f"Committed render generation {request.generation}")
                return

        self._report_error(error, request.generation, "Commit of")

    def _report_error(self, error: Exception, generation: int, stage: str) -> None:
        with self._lock:
            self.last_error = error
        logger.error(f"{stage} render generation {generation} failed: {error}")
        if self.on_error:
            self.on_error(error, generation)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for dispatched renders to finish.

        Pending (not yet dispatched) requests are not waited for; call
        ``flush`` first to include them.

        Returns:
            True if all renders completed within the timeout
        """
        with self._lock:
            futures = list(self._futures)
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'generation': self._generation,
                'pending': self._pending is not None,
                **self.stats
            }

    def shutdown(self, wait_for_renders: bool = True) -> None:
        """Cancel any pending request and stop the executor."""
        with self._lock:
            self._shutdown = True
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        self.executor.shutdown(wait=wait_for_renders)
        logger.debug("AdjustmentScheduler shut down")
