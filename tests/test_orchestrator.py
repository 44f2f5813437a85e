#!/usr/bin/env python3
"""
Tests for the process orchestrator.

Most tests spawn a real Python child so that stream draining and exit code
handling are exercised end to end.
"""

import subprocess
import sys
import threading
from unittest.mock import MagicMock

import pytest

from jobgate.config.provider import Defaults
from jobgate.logging_config import register_secret
from jobgate.modules.executor import Outcome, ProcessOrchestrator, ProcessOutcome


def child(code: str):
    return [sys.executable, "-c", code]


@pytest.mark.subprocess
class TestProcessOrchestrator:
    """Test ProcessOrchestrator.run with real child processes."""

    def test_success_forwards_both_streams(self, sink):
        """Test every stdout and stderr line reaches the sink."""
        code = (
            "import sys\n"
            "for i in range(3): print(f'out {i}', flush=True)\n"
            "for i in range(2): print(f'err {i}', file=sys.stderr, flush=True)\n"
        )

        outcome = ProcessOrchestrator(sink=sink).run(child(code))

        assert outcome.status == Outcome.SUCCESS
        assert outcome.success
        assert outcome.exit_code == 0
        assert outcome.error is None
        assert sink.stream("stdout") == ["out 0", "out 1", "out 2"]
        assert sink.stream("stderr") == ["err 0", "err 1"]
        assert outcome.stdout_lines == 3
        assert outcome.stderr_lines == 2

    def test_nonzero_exit_is_failure(self, sink):
        outcome = ProcessOrchestrator(sink=sink).run(
            child("import sys; print('boom', file=sys.stderr); sys.exit(3)")
        )

        assert outcome.status == Outcome.FAILURE
        assert outcome.exit_code == 3
        assert outcome.error == "exit code 3"
        assert sink.stream("stderr") == ["boom"]

    def test_output_larger_than_queue(self, sink):
        """Test a chatty child on both streams does not deadlock."""
        code = (
            "import sys\n"
            "for i in range(500):\n"
            "    print('o' * 200)\n"
            "    print('e' * 200, file=sys.stderr)\n"
        )
        orchestrator = ProcessOrchestrator(sink=sink, defaults=Defaults(stream_queue_size=8))

        outcome = orchestrator.run(child(code))

        assert outcome.success
        assert outcome.stdout_lines == 500
        assert outcome.stderr_lines == 500

    def test_missing_binary_is_failure(self, sink):
        """Test a spawn error is reported as an outcome."""
        outcome = ProcessOrchestrator(sink=sink).run(["/nonexistent/jobgate-binary"])

        assert outcome.status == Outcome.FAILURE
        assert outcome.exit_code is None
        assert outcome.error
        assert sink.lines == []

    def test_failing_sink_still_reaps_child(self):
        """Test a sink error drains the remaining output and waits for the child."""
        spawned = []

        def popen(*args, **kwargs):
            process = subprocess.Popen(*args, **kwargs)
            spawned.append(process)
            return process

        def broken_sink(stream, line):
            raise RuntimeError("sink down")

        code = (
            "import sys\n"
            "for i in range(5000):\n"
            "    print(i)\n"
            "    print(i, file=sys.stderr)\n"
        )
        orchestrator = ProcessOrchestrator(sink=broken_sink, defaults=Defaults(stream_queue_size=8), popen=popen)

        outcome = orchestrator.run(child(code))

        assert outcome.status == Outcome.FAILURE
        assert outcome.error == "sink down"
        assert outcome.exit_code == 0
        assert spawned[0].poll() == 0
        assert not [t.name for t in threading.enumerate() if t.name.startswith("stream ") and t.is_alive()]


class TestProcessOrchestratorErrors:
    """Test error paths with a substituted Popen."""

    def test_non_string_argument(self, sink):
        """Test an unusable argument vector is reported, not raised."""
        outcome = ProcessOrchestrator(sink=sink).run([sys.executable, None])

        assert outcome.status == Outcome.FAILURE
        assert outcome.exit_code is None
        assert outcome.error
        assert sink.lines == []

    def test_popen_type_error(self, sink):
        popen = MagicMock(side_effect=TypeError("expected str, bytes or os.PathLike object"))

        outcome = ProcessOrchestrator(sink=sink, popen=popen).run(["sqoop", "import"])

        assert outcome == ProcessOutcome.failure("expected str, bytes or os.PathLike object")

    def test_popen_error(self, sink):
        popen = MagicMock(side_effect=subprocess.SubprocessError("cannot fork"))

        outcome = ProcessOrchestrator(sink=sink, popen=popen).run(["sqoop", "import"])

        assert outcome == ProcessOutcome.failure("cannot fork")

    def test_wait_error(self, sink):
        """Test an error while waiting becomes a failure."""
        process = MagicMock()
        process.stdout.readline.side_effect = ["line\n", ""]
        process.stderr.readline.side_effect = [""]
        process.wait.side_effect = RuntimeError("lost child")
        popen = MagicMock(return_value=process)

        outcome = ProcessOrchestrator(sink=sink, popen=popen).run(["spark-submit"])

        assert outcome.status == Outcome.FAILURE
        assert outcome.error == "lost child"
        assert sink.stream("stdout") == ["line"]

    def test_interrupt_does_not_kill_child(self, sink):
        process = MagicMock()
        process.stdout.readline.side_effect = [""]
        process.stderr.readline.side_effect = [""]
        process.wait.side_effect = KeyboardInterrupt
        popen = MagicMock(return_value=process)

        outcome = ProcessOrchestrator(sink=sink, popen=popen).run(["spark-submit"])

        assert outcome.status == Outcome.FAILURE
        assert "interrupted" in outcome.error
        process.kill.assert_not_called()
        process.terminate.assert_not_called()

    def test_launch_is_logged_masked(self, sink, caplog):
        """Test the launch line never carries registered secrets."""
        register_secret("t0p-secret")
        process = MagicMock()
        process.stdout.readline.side_effect = [""]
        process.stderr.readline.side_effect = [""]
        process.wait.return_value = 0
        popen = MagicMock(return_value=process)

        with caplog.at_level("INFO", logger="jobgate.executor"):
            outcome = ProcessOrchestrator(sink=sink, popen=popen).run(
                ["sqoop", "import", "--password", "t0p-secret"]
            )

        assert outcome.success
        assert "t0p-secret" not in caplog.text
        assert "--password *****" in caplog.text
        assert popen.call_args[0][0] == ["sqoop", "import", "--password", "t0p-secret"]
