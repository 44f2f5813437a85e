"""Security interfaces following Black Box Design principles."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple


class SecurityConfigError(Exception):
    """Raised when cluster resource files cannot be read or parsed."""


def split_resources(resources: Optional[str]) -> List[str]:
    """Split a comma separated list of resource files."""
    if not resources:
        return []
    return [r.strip() for r in resources.split(",") if r.strip()]


@dataclass(frozen=True)
class ClusterConfig:
    """Merged key/value view of a cluster's configuration resources."""
    properties: Dict[str, str] = field(default_factory=dict)
    resources: Tuple[str, ...] = ()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(key, default)


class SecuritySubsystem(Protocol):
    """Protocol for the cluster security subsystem - allows swappable implementations."""

    def load_config(self, resource_paths: Sequence[str]) -> ClusterConfig:
        """
        Load cluster configuration from resource files.

        Raises:
            SecurityConfigError: If a resource cannot be read
        """
        ...

    def is_security_enabled(self, config: ClusterConfig) -> bool:
        """Check whether the cluster enforces authentication."""
        ...

    def authenticate(self, principal: str, keytab: str) -> bool:
        """
        Authenticate principal with keytab.

        Returns:
            True on success, False if the credentials were rejected
        """
        ...
