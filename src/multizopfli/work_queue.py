"""Concurrency-capped task queue with an explicit start gate."""

import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum


logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


TERMINAL_STATES = (TaskState.SUCCEEDED, TaskState.FAILED)


@dataclass
class TaskOutcome:
    """Terminal result of one task, handed back to the draining thread."""

    path: str
    state: TaskState
    after_size: int | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == TaskState.SUCCEEDED


class Task:
    """One unit of work bound to exactly one file path.

    Lifecycle: queued -> running -> succeeded | failed. A terminal state is
    final; any further transition raises RuntimeError.
    """

    def __init__(self, path: str, fn: Callable[[], int]):
        self.path = path
        self.fn = fn
        self.state = TaskState.QUEUED

    def _transition(self, new_state: TaskState):
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f'Task {self.path} already {self.state.value}, cannot become {new_state.value}')
        self.state = new_state

    def run(self) -> TaskOutcome:
        """Run fn, converting any exception into a failed outcome."""
        self._transition(TaskState.RUNNING)
        try:
            after_size = self.fn()
        except Exception as e:
            self._transition(TaskState.FAILED)
            return TaskOutcome(path=self.path, state=TaskState.FAILED, error=e)
        self._transition(TaskState.SUCCEEDED)
        return TaskOutcome(path=self.path, state=TaskState.SUCCEEDED, after_size=after_size)


class BoundedWorkQueue:
    """Runs at most `concurrency` tasks at once, in FIFO admission order.

    The queue is created paused: tasks enqueued before start() are held
    until start() releases them. Tasks enqueued after start() are submitted
    right away, still subject to the cap. drain() is the join point.
    """

    def __init__(self, concurrency: int):
        if concurrency < 1:
            raise ValueError(f'concurrency must be positive, got {concurrency}')
        self.concurrency = concurrency
        self._executor = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix='Zopfli')
        self._lock = threading.Lock()
        self._started = False
        self._held: list[Task] = []
        self._futures: dict[Future, Task] = {}
        self._running = 0
        self.running_high_water = 0

    @property
    def started(self) -> bool:
        return self._started

    def __len__(self) -> int:
        """Number of admitted tasks."""
        with self._lock:
            return len(self._held) + len(self._futures)

    def enqueue(self, path: str, fn: Callable[[], int]) -> Task:
        """Admit one task for path. fn returns the file's new size."""
        task = Task(path, fn)
        with self._lock:
            if self._started:
                self._submit(task)
            else:
                self._held.append(task)
        return task

    def start(self):
        """Release held tasks. Calling start() twice is a no-op."""
        with self._lock:
            if self._started:
                return
            self._started = True
            held, self._held = self._held, []
            logger.debug(f'Releasing {len(held)} tasks with concurrency {self.concurrency}')
            for task in held:
                self._submit(task)

    def drain(self) -> Iterator[TaskOutcome]:
        """Yield one outcome per admitted task as each finishes.

        Returns once every task is terminal, then shuts the pool down. The
        queue must have been started.
        """
        if not self._started:
            raise RuntimeError('drain() called before start()')
        seen: set[Future] = set()
        try:
            while True:
                # Pick up tasks admitted while earlier ones were draining
                with self._lock:
                    pending = [f for f in self._futures if f not in seen]
                if not pending:
                    break
                for future in as_completed(pending):
                    seen.add(future)
                    yield future.result()
        finally:
            self._executor.shutdown(wait=True)

    def _submit(self, task: Task):
        self._futures[self._executor.submit(self._run, task)] = task

    def _run(self, task: Task) -> TaskOutcome:
        with self._lock:
            self._running += 1
            self.running_high_water = max(self.running_high_water, self._running)
        try:
            return task.run()
        finally:
            with self._lock:
                self._running -= 1
