"""
Security gate.

Decides whether a job must authenticate against the cluster before launch,
and performs the authentication. A FAILED decision is terminal: the job is
routed to failure without starting the external process.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .interfaces import SecuritySubsystem, split_resources

logger = logging.getLogger("jobgate.security.gate")

MISSING_CREDENTIALS = "missing credentials"
AUTHENTICATION_REJECTED = "authentication rejected"


class SecurityState(str, Enum):
    """States of the security gate."""

    SKIPPED = "skipped"
    CHECKING = "checking"
    NOT_REQUIRED = "not_required"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass(frozen=True)
class SecurityDecision:
    """Outcome of the security gate for one invocation."""

    state: SecurityState
    reason: Optional[str] = None
    principal: Optional[str] = None
    keytab: Optional[str] = None

    @property
    def proceed(self) -> bool:
        """Whether the job may be launched."""
        return self.state != SecurityState.FAILED

    @property
    def authenticated(self) -> bool:
        """Whether credentials must be injected into the invocation."""
        return self.state == SecurityState.AUTHENTICATED

    @classmethod
    def failed(cls, reason: str) -> "SecurityDecision":
        return cls(state=SecurityState.FAILED, reason=reason)


class SecurityGate:
    """Kerberos authentication state machine guarding process launch."""

    def __init__(self, subsystem: SecuritySubsystem):
        self.subsystem = subsystem

    def evaluate(
        self,
        principal: Optional[str] = None,
        keytab: Optional[str] = None,
        resources: Optional[str] = None,
    ) -> SecurityDecision:
        """
        Run the gate for one invocation.

        Args:
            principal: Kerberos principal
            keytab: Path to the keytab for principal
            resources: Comma separated Hadoop configuration resources

        Returns:
            SecurityDecision; never raises
        """
        principal = (principal or "").strip()
        keytab = (keytab or "").strip()
        resources = (resources or "").strip()

        if not (principal or keytab or resources):
            return SecurityDecision(state=SecurityState.SKIPPED)

        logger.debug(f"Security state: {SecurityState.CHECKING.value}")

        try:
            config = self.subsystem.load_config(split_resources(resources))

            if not self.subsystem.is_security_enabled(config):
                # Supplied credentials are not used on an unsecured cluster
                logger.info("Cluster security is disabled, proceeding without authentication")
                return SecurityDecision(state=SecurityState.NOT_REQUIRED)

            if not principal or not keytab:
                logger.error(
                    "Kerberos Principal and Kerberos KeyTab information missing in Kerberos enabled cluster."
                )
                return SecurityDecision.failed(MISSING_CREDENTIALS)

            logger.info("User authentication initiated")
            if not self.subsystem.authenticate(principal, keytab):
                logger.info("User authentication failed.")
                return SecurityDecision.failed(AUTHENTICATION_REJECTED)

        except Exception as e:
            logger.error(f"Unknown exception occurred while authenticating user: {e}")
            return SecurityDecision.failed(str(e) or type(e).__name__)

        logger.info("User authenticated successfully.")
        return SecurityDecision(
            state=SecurityState.AUTHENTICATED, principal=principal, keytab=keytab
        )
