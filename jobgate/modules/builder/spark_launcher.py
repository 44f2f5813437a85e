"""
Spark launch spec builder.

Collects the settings of a Spark application and produces an immutable
LaunchSpec that renders to a `spark-submit` argument vector.
"""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from jobgate.config.provider import Defaults, get_defaults

logger = logging.getLogger("jobgate.builder.spark")

DRIVER_MEMORY = "spark.driver.memory"
EXECUTOR_MEMORY = "spark.executor.memory"
EXECUTOR_INSTANCES = "spark.executor.instances"
EXECUTOR_CORES = "spark.executor.cores"
SPARK_NETWORK_TIMEOUT = "spark.network.timeout"
SPARK_YARN_KEYTAB = "spark.yarn.keytab"
SPARK_YARN_PRINCIPAL = "spark.yarn.principal"

SENSITIVE_CONF_KEYS = frozenset({SPARK_YARN_KEYTAB})

DEFAULT_SUBMIT_SCRIPT = os.path.join("bin", "spark-submit")


@dataclass(frozen=True)
class LaunchSpec:
    """Fully resolved description of a Spark application launch."""

    spark_home: str
    app_resource: str
    main_class: str
    master: str
    app_name: Optional[str] = None
    app_args: Tuple[str, ...] = ()
    conf: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    submit_script: str = DEFAULT_SUBMIT_SCRIPT

    @property
    def submit_path(self) -> str:
        return os.path.join(self.spark_home, self.submit_script)

    def _argv(self, mask: Optional[str] = None) -> List[str]:
        argv = [self.submit_path, "--master", self.master, "--class", self.main_class]
        if self.app_name:
            argv += ["--name", self.app_name]
        for key, value in self.conf.items():
            if mask is not None and key in SENSITIVE_CONF_KEYS:
                value = mask
            argv += ["--conf", f"{key}={value}"]
        argv.append(self.app_resource)
        argv.extend(self.app_args)
        return argv

    def to_argv(self) -> List[str]:
        """Argument vector suitable for subprocess (no shell)."""
        return self._argv()

    def masked_argv(self, mask: str = "*****") -> List[str]:
        """Argument vector with credential settings masked, for logging."""
        return self._argv(mask)


class SparkLauncherBuilder:
    """Fluent builder for a LaunchSpec. Performs no I/O."""

    def __init__(self, defaults: Optional[Defaults] = None):
        self._defaults = defaults or get_defaults()
        self._spark_home: Optional[str] = None
        self._submit_script = DEFAULT_SUBMIT_SCRIPT
        self._app_resource: Optional[str] = None
        self._main_class: Optional[str] = None
        self._master: Optional[str] = None
        self._app_name: Optional[str] = None
        self._app_args: List[str] = []
        self._conf: Dict[str, str] = {}

    def set_spark_home(self, spark_home: str) -> "SparkLauncherBuilder":
        self._spark_home = spark_home
        return self

    def set_submit_script(self, submit_script: str) -> "SparkLauncherBuilder":
        self._submit_script = submit_script
        return self

    def set_app_resource(self, app_resource: str) -> "SparkLauncherBuilder":
        self._app_resource = app_resource
        return self

    def set_main_class(self, main_class: str) -> "SparkLauncherBuilder":
        self._main_class = main_class
        return self

    def set_master(self, master: str) -> "SparkLauncherBuilder":
        self._master = master
        return self

    def set_app_name(self, app_name: str) -> "SparkLauncherBuilder":
        self._app_name = app_name
        return self

    def add_app_args(self, args: Optional[str]) -> "SparkLauncherBuilder":
        """
        Add comma separated application arguments.

        Arguments are split on every comma with no escaping, so an argument
        can never contain a comma.
        """
        if args:
            self._app_args.extend(args.split(","))
        return self

    def set_conf(self, key: str, value: str) -> "SparkLauncherBuilder":
        self._conf[key] = str(value)
        return self

    def set_driver_memory(self, memory: str) -> "SparkLauncherBuilder":
        return self.set_conf(DRIVER_MEMORY, memory)

    def set_executor_memory(self, memory: str) -> "SparkLauncherBuilder":
        return self.set_conf(EXECUTOR_MEMORY, memory)

    def set_number_of_executors(self, count: str) -> "SparkLauncherBuilder":
        return self.set_conf(EXECUTOR_INSTANCES, count)

    def set_executor_cores(self, cores: str) -> "SparkLauncherBuilder":
        return self.set_conf(EXECUTOR_CORES, cores)

    def set_network_timeout(self, timeout: str) -> "SparkLauncherBuilder":
        """Configures Spark's internal network timeout, not the wait on the process."""
        return self.set_conf(SPARK_NETWORK_TIMEOUT, timeout)

    def set_kerberos(self, principal: str, keytab: str) -> "SparkLauncherBuilder":
        self.set_conf(SPARK_YARN_KEYTAB, keytab)
        return self.set_conf(SPARK_YARN_PRINCIPAL, principal)

    def build(self) -> LaunchSpec:
        """
        Build the launch spec.

        Raises:
            ValueError: If spark home, app resource, main class or master is missing
        """
        missing = [
            name
            for name, value in (
                ("spark_home", self._spark_home),
                ("app_resource", self._app_resource),
                ("main_class", self._main_class),
                ("master", self._master),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing required launch settings: {', '.join(missing)}")

        spec = LaunchSpec(
            spark_home=self._spark_home,
            app_resource=self._app_resource,
            main_class=self._main_class,
            master=self._master,
            app_name=self._app_name,
            app_args=tuple(self._app_args),
            conf=MappingProxyType(dict(self._conf)),
            submit_script=self._submit_script,
        )
        logger.debug(f"Built launch spec: {' '.join(spec.masked_argv(self._defaults.mask_string))}")
        return spec
