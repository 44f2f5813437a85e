"""
Security Module - Black Box Interface

Purpose: Decide whether a job must authenticate and perform the authentication
Interface: SecurityGate.evaluate(principal, keytab, resources) -> SecurityDecision
Hidden: resource parsing, Kerberos ticket acquisition

The subsystem can be replaced (e.g. a keytab-less ticket cache) by any
object implementing SecuritySubsystem.
"""

from .gate import SecurityDecision, SecurityGate, SecurityState
from .hadoop import HadoopSecuritySubsystem
from .interfaces import ClusterConfig, SecurityConfigError, SecuritySubsystem

__all__ = [
    "ClusterConfig",
    "HadoopSecuritySubsystem",
    "SecurityConfigError",
    "SecurityDecision",
    "SecurityGate",
    "SecurityState",
    "SecuritySubsystem",
]
