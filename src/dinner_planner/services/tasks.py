"""
Dinner Planner - Background generation tasks.

Generation can outlive the request that started it. A GenerationTask wraps
the asyncio task so callers can await it, cancel it, or poll its state
(pending → running → complete | rejected | failed | cancelled) instead of
relying on callbacks mutating shared state.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Coroutine
from enum import Enum
from typing import Any

from dinner_planner.errors import GenerationError, ValidationError
from dinner_planner.services.dish_ingredients import ResolutionOutcome

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    REJECTED = "rejected"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = {TaskState.COMPLETE, TaskState.REJECTED, TaskState.FAILED, TaskState.CANCELLED}

DoneCallback = Callable[["GenerationTask"], None]


class GenerationTask:
    """Handle on one dish generation running in the background."""

    def __init__(
        self,
        dish_id: str,
        coro: Coroutine[Any, Any, ResolutionOutcome],
        task_id: str | None = None,
        owner_id: int | None = None,
    ):
        self.id = task_id or uuid.uuid4().hex
        self.dish_id = dish_id
        self.owner_id = owner_id
        self.state = TaskState.PENDING
        self.outcome: ResolutionOutcome | None = None
        self.error: str | None = None
        self._coro = coro
        self._task: asyncio.Task | None = None
        self._callbacks: list[DoneCallback] = []

    def start(self) -> "GenerationTask":
        """Schedule the work on the running event loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"generation-{self.id}")
            self._task.add_done_callback(self._on_done)
        return self

    async def _run(self) -> None:
        self.state = TaskState.RUNNING
        try:
            self.outcome = await self._coro
        except ValidationError as e:
            self.state = TaskState.REJECTED
            self.error = e.message
            return
        except Exception:
            logger.exception(f"Generation task {self.id} for dish {self.dish_id} failed")
            self.state = TaskState.FAILED
            self.error = "Generation failed"
            return
        self.state = TaskState.COMPLETE

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self.state = TaskState.CANCELLED
            self._coro.close()

        for callback in self._callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception(f"Done callback failed for generation task {self.id}")

    def add_done_callback(self, callback: DoneCallback) -> None:
        """Call `callback(task)` once the task reaches a terminal state."""
        if self.done():
            callback(self)
        else:
            self._callbacks.append(callback)

    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def cancel(self) -> bool:
        """Cancel the work. Returns False when it already finished."""
        if self._task is None:
            self.state = TaskState.CANCELLED
            self._coro.close()
            for callback in self._callbacks:
                callback(self)
            return True
        if self._task.done():
            return False
        return self._task.cancel()

    async def wait(self) -> ResolutionOutcome:
        """
        Wait for the result. Cancelling the waiter does not cancel the task.

        Raises:
            ValidationError: the dish name was rejected
            GenerationError: the task failed
            asyncio.CancelledError: the task was cancelled
        """
        if self._task is None:
            if self.state is TaskState.CANCELLED:
                raise asyncio.CancelledError()
            raise RuntimeError(f"Generation task {self.id} was never started")

        await asyncio.shield(self._task)

        if self.state is TaskState.REJECTED:
            raise ValidationError(self.error or "")
        if self.state is TaskState.FAILED:
            raise GenerationError(self.error or "Generation failed")
        return self.outcome

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dish_id": self.dish_id,
            "state": self.state.value,
            "error": self.error,
            "outcome": self.outcome.to_dict() if self.outcome else None,
        }


class TaskRegistry:
    """
    In-process registry of generation tasks, keyed by task id.

    Finished tasks stay visible for `retention_seconds` so a client that
    reconnects can still read the result.
    """

    def __init__(self, retention_seconds: float = 300):
        self.retention_seconds = retention_seconds
        self._tasks: dict[str, GenerationTask] = {}

    def start(
        self,
        dish_id: str,
        coro: Coroutine[Any, Any, ResolutionOutcome],
        owner_id: int | None = None,
    ) -> GenerationTask:
        task = GenerationTask(dish_id, coro, owner_id=owner_id)
        self._tasks[task.id] = task
        task.add_done_callback(self._schedule_cleanup)
        return task.start()

    def get(self, task_id: str) -> GenerationTask | None:
        return self._tasks.get(task_id)

    def __len__(self) -> int:
        return len(self._tasks)

    def _schedule_cleanup(self, task: GenerationTask) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._tasks.pop(task.id, None)
            return
        loop.call_later(self.retention_seconds, self._tasks.pop, task.id, None)
