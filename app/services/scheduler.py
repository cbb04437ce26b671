import logging
import time
from datetime import datetime, timezone
from threading import Event, Lock, Thread
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Runs a function on a background daemon thread, once right away and then every `delay` seconds,
    until stopped. A run that raises is logged and the loop continues.
    """

    def __init__(self, function: Callable[..., Any], delay: int, max_logs_entries: int, name: str = "scheduler") -> None:
        self.__function = function
        self.__delay = delay
        self.__max_logs_entries = max_logs_entries
        self.__name = name
        self.__thread: Thread | None = None
        self.__stop_event = Event()
        self.__logs_lock = Lock()
        self.__runner_id = 1
        self.__runner_logs: list[dict[str, Any]] = []

    def is_running(self) -> bool:
        return self.__thread is not None and self.__thread.is_alive()

    def start(self) -> None:
        if self.__thread is not None:
            return

        self.__stop_event.clear()
        self.__thread = Thread(target=self.__run, name=self.__name, daemon=True)
        self.__thread.start()
        logger.info("Started %s with a delay of %s seconds", self.__name, self.__delay)

    def stop(self) -> None:
        if self.__thread is None:
            return

        self.__stop_event.set()
        self.__thread.join()
        self.__thread = None
        logger.info("Stopped %s", self.__name)

    def __run(self) -> None:
        while not self.__stop_event.is_set():
            start_time = time.time()
            error = None
            try:
                self.__function()
            except Exception as e:
                logger.exception("Scheduled run of %s failed", self.__name)
                error = str(e)
            self.update_runner(start_time, time.time(), error)
            self.__stop_event.wait(self.__delay)

    def update_runner(self, start_time: float, end_time: float, error: str | None = None) -> None:
        data: dict[str, Any] = {
            "runner_id": self.__runner_id,
            "started_at": datetime.fromtimestamp(start_time, tz=timezone.utc).isoformat(),
            "finished_at": datetime.fromtimestamp(end_time, tz=timezone.utc).isoformat(),
            "time_delta": end_time - start_time,
            "status": "error" if error else "success",
        }
        if error:
            data["error"] = error
        if self.__thread is not None:
            data["thread_name"] = self.__thread.name
            data["thread_id"] = self.__thread.ident

        with self.__logs_lock:
            self.__runner_logs.append(data)
            self.__runner_id += 1
            if len(self.__runner_logs) > self.__max_logs_entries:
                self.__runner_logs.pop(0)

    def get_runner_history(self) -> list[dict[str, Any]]:
        with self.__logs_lock:
            return list(self.__runner_logs)
