"""
Hadoop/Kerberos security subsystem.

Reads Hadoop `*-site.xml` resources and authenticates with `kinit`.
"""

import logging
import os
import subprocess
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Sequence

from jobgate.config.provider import SecurityConfig

from .interfaces import ClusterConfig, SecurityConfigError

logger = logging.getLogger("jobgate.security.hadoop")

AUTHENTICATION_KEY = "hadoop.security.authentication"


def parse_site_xml(path: str) -> Dict[str, str]:
    """
    Parse one Hadoop configuration resource.

    Args:
        path: Path to a *-site.xml file

    Returns:
        Mapping of property name to value

    Raises:
        SecurityConfigError: If the file is missing or not valid XML
    """
    if not os.path.isfile(path):
        raise SecurityConfigError(f"File {path} does not exist or is not a file")

    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise SecurityConfigError(f"Unable to read configuration resource {path}: {e}") from e

    properties = {}
    for prop in root.iter("property"):
        name = prop.findtext("name")
        if name is None:
            continue
        properties[name.strip()] = (prop.findtext("value") or "").strip()
    return properties


class HadoopSecuritySubsystem:
    """Security subsystem backed by Hadoop resource files and the kinit binary."""

    def __init__(self, config: Optional[SecurityConfig] = None):
        self.config = config or SecurityConfig(kinit_binary="kinit", kinit_timeout=60)

    def load_config(self, resource_paths: Sequence[str]) -> ClusterConfig:
        """Merge resources in order; later files override earlier ones."""
        properties: Dict[str, str] = {}
        for path in resource_paths:
            properties.update(parse_site_xml(path))
            logger.debug(f"Loaded configuration resource {path}")
        return ClusterConfig(properties=properties, resources=tuple(resource_paths))

    def is_security_enabled(self, config: ClusterConfig) -> bool:
        return (config.get(AUTHENTICATION_KEY, "simple") or "").lower() == "kerberos"

    def authenticate(self, principal: str, keytab: str) -> bool:
        """
        Obtain a Kerberos ticket for principal using keytab.

        Raises:
            OSError: If kinit cannot be started
            subprocess.TimeoutExpired: If kinit does not finish in time
        """
        cmd = [self.config.kinit_binary, "-kt", keytab, principal]
        logger.debug(f"Running: {' '.join(cmd)}")

        process = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=self.config.kinit_timeout,
        )

        if process.returncode != 0:
            logger.error(f"kinit failed for {principal} ({process.returncode}): {process.stderr.strip()}")
            return False
        return True
