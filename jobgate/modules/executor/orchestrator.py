#!/usr/bin/env python3
"""
Process orchestrator.

Launches an external job, drains its stdout and stderr concurrently into
the log sink, waits for it to exit and classifies the result. Every call
ends in exactly one ProcessOutcome; errors are never raised to the caller.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from queue import Queue
from threading import Thread
from typing import Callable, IO, List, Optional, Sequence

from jobgate.config.provider import Defaults, get_defaults
from jobgate.logging_config import mask

logger = logging.getLogger("jobgate.executor")
process_logger = logging.getLogger("jobgate.process")

STDOUT = "stdout"
STDERR = "stderr"

LineSink = Callable[[str, str], None]


class Outcome(str, Enum):
    """Terminal classification of one job execution."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ProcessOutcome:
    """Result of running one external process."""

    status: Outcome
    exit_code: Optional[int] = None
    error: Optional[str] = None
    stdout_lines: int = 0
    stderr_lines: int = 0
    execution_time_ms: int = 0

    @property
    def success(self) -> bool:
        return self.status == Outcome.SUCCESS

    @classmethod
    def failure(cls, error: str, exit_code: Optional[int] = None) -> "ProcessOutcome":
        return cls(status=Outcome.FAILURE, exit_code=exit_code, error=error)


def log_line(stream: str, line: str) -> None:
    """Default sink: forward a process output line to the log at INFO."""
    process_logger.info(f"[{stream}] {line}")


class StreamDrainer(Thread):
    """Reads one process stream line by line into a shared queue."""

    def __init__(self, name: str, stream: IO[str], queue: Queue):
        super().__init__(name=f"stream {name}", daemon=True)
        self.stream_name = name
        self.stream = stream
        self.queue = queue

    def run(self) -> None:
        try:
            for line in iter(self.stream.readline, ""):
                self.queue.put((self.stream_name, line.rstrip("\r\n")))
        except (OSError, ValueError) as e:
            # Stream closed underneath us
            logger.debug(f"Stopped reading {self.stream_name}: {e}")
        finally:
            self.queue.put((self.stream_name, None))


class ProcessOrchestrator:
    """Runs external processes and classifies their outcome by exit code."""

    def __init__(
        self,
        sink: Optional[LineSink] = None,
        defaults: Optional[Defaults] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.sink = sink or log_line
        self.defaults = defaults or get_defaults()
        self._popen = popen

    def run(self, argv: Sequence[str], masked_argv: Optional[Sequence[str]] = None) -> ProcessOutcome:
        """
        Launch argv and block until it exits.

        Args:
            argv: Command and arguments, executed without a shell
            masked_argv: Version of argv safe to log

        Returns:
            ProcessOutcome; SUCCESS only for exit code 0
        """
        start_time = time.time()

        try:
            display = " ".join(masked_argv) if masked_argv else mask(" ".join(argv))
            logger.info(f"Launching: {display}")
            process = self._popen(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except Exception as e:
            logger.error(f"Unable to launch process: {e}")
            return ProcessOutcome.failure(str(e))

        return self._supervise(process, start_time)

    def _supervise(self, process: subprocess.Popen, start_time: float) -> ProcessOutcome:
        queue: Queue = Queue(maxsize=self.defaults.stream_queue_size)
        drainers = [
            StreamDrainer(STDOUT, process.stdout, queue),
            StreamDrainer(STDERR, process.stderr, queue),
        ]
        counts = {STDOUT: 0, STDERR: 0}
        sink_error: Optional[Exception] = None

        try:
            for drainer in drainers:
                drainer.start()

            logger.info("Waiting for job to complete")
            open_streams = len(drainers)
            while open_streams:
                stream, line = queue.get()
                if line is None:
                    open_streams -= 1
                    continue
                counts[stream] += 1
                if sink_error is not None:
                    continue
                try:
                    self.sink(stream, line)
                except Exception as e:
                    # Output is still drained after a sink failure
                    sink_error = e
                    logger.error(f"Log sink failed, discarding remaining output: {e}")

            exit_code = process.wait()
            self._join(drainers)

            if sink_error is not None:
                return ProcessOutcome.failure(str(sink_error), exit_code=exit_code)

        except KeyboardInterrupt:
            # The child is left running; only the wait is abandoned
            logger.error("Interrupted while waiting for job to complete")
            return ProcessOutcome.failure("interrupted while waiting for process")
        except Exception as e:
            logger.error(f"Error while waiting for job to complete: {e}")
            return ProcessOutcome.failure(str(e))

        execution_time_ms = int((time.time() - start_time) * 1000)
        if exit_code != 0:
            logger.info(f"*** Completed with failed status {exit_code}")
            status = Outcome.FAILURE
        else:
            logger.info(f"*** Completed with status {exit_code}")
            status = Outcome.SUCCESS

        return ProcessOutcome(
            status=status,
            exit_code=exit_code,
            error=None if status == Outcome.SUCCESS else f"exit code {exit_code}",
            stdout_lines=counts[STDOUT],
            stderr_lines=counts[STDERR],
            execution_time_ms=execution_time_ms,
        )

    @staticmethod
    def _join(drainers: List[StreamDrainer]) -> None:
        for drainer in drainers:
            drainer.join()
