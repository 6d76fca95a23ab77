#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/worker.py
"""Run line diffs away from the interactive thread.

The module is split in two parts joined by plain message objects:

- :func:`handle_request` is the computation. It turns a :class:`DiffRequest`
  into a :class:`DiffResponse` and knows nothing about how either travels.
- :class:`DiffWorker` is the transport. It numbers requests, hands them to an
  executor (a process pool by default) and resolves a
  :class:`concurrent.futures.Future` with the response. Without an executor
  the same computation runs inline, so results are identical either way.

Examples
--------
    >>> with DiffWorker.start(max_workers=2) as worker:
    ...     future = worker.submit("a\\nb\\n", "a\\nc\\n")
    ...     info = future.result()

"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Optional

from diffview.exceptions import ComputationError, DiffViewError, TextInputRequiredError, ValidationError
from diffview.line_diff import compute_line_information, ensure_comparable
from diffview.logging_utils import init_worker_logging
from diffview.models import ComputedLineInformation
from diffview.options import DiffOptions

logger = logging.getLogger(__name__)

@dataclass(slots=True)
class DiffRequest:
    """Message asking for the line diff of two values."""

    request_id: int
    old_value: Any
    new_value: Any
    options: DiffOptions


@dataclass(slots=True)
class DiffResponse:
    """Message carrying the result of one request, or why it failed."""

    request_id: int
    result: ComputedLineInformation | None = None
    error: str | None = None
    error_type: str | None = None
    parameter_name: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def handle_request(request: DiffRequest) -> DiffResponse:
    """Compute the line information for a request.

    Failures are reported in the response instead of raised, so the response
    can always be sent back to the requesting thread.
    """
    logger.debug(f"Computing request {request.request_id}")
    try:
        result = compute_line_information(request.old_value, request.new_value, **request.options.line_kwargs())
    except ValidationError as e:
        return DiffResponse(
            request.request_id, error=e.message, error_type=type(e).__name__, parameter_name=e.parameter_name
        )
    except DiffViewError as e:
        return DiffResponse(request.request_id, error=e.message, error_type=type(e).__name__)
    except Exception as e:
        logger.debug(f"Request {request.request_id} failed: {e}")
        return DiffResponse(request.request_id, error=str(e), error_type=type(e).__name__)
    return DiffResponse(request.request_id, result=result)


class DiffWorker:
    """Submit diff requests to an executor and deliver results through futures.

    Parameters
    ----------
    executor : Executor, optional
        Executor running :func:`handle_request`. When None, requests are
        computed synchronously by :meth:`submit`.

    """

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self._executor = executor
        self._owns_executor = False
        self._next_id = 1
        self._lock = threading.Lock()

    @classmethod
    def start(
        cls,
        max_workers: Optional[int] = None,
        log_level: int | str | None = None,
        trace_mode: bool = False,
    ) -> DiffWorker:
        """Create a worker backed by its own process pool.

        Parameters
        ----------
        max_workers : int, optional
            Size of the pool; the executor default when None
        log_level : int | str, optional
            When given, each pool process runs
            :func:`~diffview.logging_utils.init_worker_logging` with this level
        trace_mode : bool, default False
            Use the trace format in the pool processes

        """
        pool_kwargs: dict[str, Any] = {}
        if log_level is not None:
            pool_kwargs["initializer"] = init_worker_logging
            pool_kwargs["initargs"] = (log_level, trace_mode)
        worker = cls(ProcessPoolExecutor(max_workers=max_workers, **pool_kwargs))
        worker._owns_executor = True
        return worker

    @property
    def is_background(self) -> bool:
        """Whether requests run on an executor rather than inline."""
        return self._executor is not None

    def _allocate_id(self) -> int:
        with self._lock:
            request_id = self._next_id
            self._next_id += 1
        return request_id

    def submit(
        self,
        old_value: Any,
        new_value: Any,
        options: Optional[DiffOptions] = None,
    ) -> Future[ComputedLineInformation]:
        """Request the line diff of two values.

        Parameters
        ----------
        old_value : str or Any
            Original text or parsed value
        new_value : str or Any
            Updated text or parsed value
        options : DiffOptions, optional
            Diff options; defaults to ``DiffOptions()``

        Returns
        -------
        Future
            Resolves to the :class:`ComputedLineInformation`, or fails with
            :class:`ComputationError` when the computation raised

        Raises
        ------
        TextInputRequiredError
            If a value is structured and the compare mode is a custom
            comparator; raised immediately, before anything is submitted

        """
        options = options or DiffOptions()
        ensure_comparable(old_value, new_value, options.compare_mode)
        request = DiffRequest(self._allocate_id(), old_value, new_value, options)
        outer: Future[ComputedLineInformation] = Future()

        # Custom comparators may be lambdas or closures that cannot be pickled
        if self._executor is None or not options.is_portable:
            outer.set_running_or_notify_cancel()
            self._deliver(outer, request, handle_request(request))
            return outer

        logger.debug(f"Submitting request {request.request_id} to executor")
        inner = self._executor.submit(handle_request, request)
        inner.add_done_callback(lambda done: self._complete(outer, request, done))
        return outer

    def _complete(
        self,
        outer: Future[ComputedLineInformation],
        request: DiffRequest,
        inner: Future[DiffResponse],
    ) -> None:
        if inner.cancelled():
            outer.cancel()
            return
        if not outer.set_running_or_notify_cancel():
            return

        exc = inner.exception()
        if exc is not None:
            logger.warning(f"Background diff request {request.request_id} failed: {exc}")
            outer.set_exception(
                ComputationError(
                    f"Diff computation failed: {exc}",
                    request_id=request.request_id,
                    error_type=type(exc).__name__,
                    original_error=exc if isinstance(exc, Exception) else None,
                )
            )
            return
        self._deliver(outer, request, inner.result())

    @staticmethod
    def _deliver(future: Future[ComputedLineInformation], request: DiffRequest, response: DiffResponse) -> None:
        if response.ok:
            future.set_result(response.result)
            return

        logger.warning(f"Diff request {response.request_id} failed: {response.error_type}: {response.error}")
        message = response.error or "Invalid diff input"
        if response.error_type == TextInputRequiredError.__name__:
            future.set_exception(TextInputRequiredError(request.options.compare_mode, message))
        elif response.error_type == ValidationError.__name__:
            future.set_exception(ValidationError(message, parameter_name=response.parameter_name))
        else:
            future.set_exception(
                ComputationError(
                    f"Diff computation failed: {response.error}",
                    request_id=response.request_id,
                    error_type=response.error_type,
                )
            )

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the executor if this worker created it."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
            self._owns_executor = False

    def __enter__(self) -> DiffWorker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()


__all__ = ["DiffRequest", "DiffResponse", "handle_request", "DiffWorker"]
