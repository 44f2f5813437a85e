"""
Executor Module - Black Box Interface

Purpose: Launch external jobs as child processes and report one outcome per job
Interface: SparkJobRunner / SqoopJobRunner .run(job, unit_of_work) -> ProcessOutcome
Hidden: process spawning, stream draining, security gating, outcome routing

Can be replaced with different execution mechanisms (e.g. a remote job server).
"""

from .orchestrator import Outcome, ProcessOrchestrator, ProcessOutcome
from .runner import (
    CallbackOutcomeRouter,
    LoggingOutcomeRouter,
    OutcomeRouter,
    SparkJobRunner,
    SqoopJobRunner,
    build_spark_launch,
    build_sqoop_command,
)

__all__ = [
    "CallbackOutcomeRouter",
    "LoggingOutcomeRouter",
    "Outcome",
    "OutcomeRouter",
    "ProcessOrchestrator",
    "ProcessOutcome",
    "SparkJobRunner",
    "SqoopJobRunner",
    "build_spark_launch",
    "build_sqoop_command",
]
