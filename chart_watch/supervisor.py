"""
Detached task supervisor

Runs advisory background work (such as chart freshness checks) without
ever blocking or failing the caller. Failures are logged, not raised.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional, Set, Union

import pulumi

Handle = Union["asyncio.Task[Any]", threading.Thread]


class TaskSupervisor:
    """Tracks detached tasks and surfaces their failures as log lines"""

    def __init__(self) -> None:
        self._active_tasks: Set["asyncio.Task[Any]"] = set()
        self._threads: Set[threading.Thread] = set()
        self._lock = threading.Lock()

    def submit(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> Handle:
        """Schedule coro in the background and return immediately.

        Uses the running event loop (the Pulumi program runs inside one).
        Without a running loop the coroutine gets its own loop on a daemon
        thread.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return self._start_thread(coro, name)

        task = loop.create_task(coro, name=name)
        self._active_tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: "asyncio.Task[Any]") -> None:
        try:
            task.result()
        except asyncio.CancelledError:
            pass
        except Exception as err:
            pulumi.log.error(f"Background task '{task.get_name()}' failed: {err}")
        finally:
            self._active_tasks.discard(task)

    def _start_thread(self, coro: Coroutine[Any, Any, Any], name: Optional[str]) -> threading.Thread:
        thread = threading.Thread(
            target=self._run_in_thread, args=(coro, name), name=name, daemon=True
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()
        return thread

    def _run_in_thread(self, coro: Coroutine[Any, Any, Any], name: Optional[str]) -> None:
        try:
            asyncio.run(coro)
        except Exception as err:
            pulumi.log.error(f"Background task '{name}' failed: {err}")
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    async def block_till_done(self) -> None:
        """Wait for all tasks on the event loop to complete."""
        active_tasks = list(self._active_tasks)
        if active_tasks:
            await asyncio.gather(*active_tasks, return_exceptions=True)
        else:
            await asyncio.sleep(0)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for background threads started without an event loop."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)

    def num_active_tasks(self) -> int:
        with self._lock:
            return len(self._active_tasks) + len(self._threads)


_default_supervisor = TaskSupervisor()


def get_supervisor() -> TaskSupervisor:
    """Get the process-wide supervisor"""
    return _default_supervisor
