"""
Job runners.

Wire the security gate, the builders and the process orchestrator together
and hand every unit of work to exactly one outcome on the router.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from jobgate.config.provider import (
    ConfigProvider,
    Defaults,
    EnvConfigProvider,
    SqoopConfig,
    get_defaults,
)
from jobgate.modules.api.models import SparkJobDefinition, SqoopJobDefinition
from jobgate.modules.builder import LaunchSpec, RenderedCommand, SparkLauncherBuilder, SqoopBuilder
from jobgate.modules.security import HadoopSecuritySubsystem, SecurityDecision, SecurityGate

from .orchestrator import Outcome, ProcessOrchestrator, ProcessOutcome

logger = logging.getLogger("jobgate.runner")

REL_SUCCESS = "success"
REL_FAILURE = "failure"


class OutcomeRouter(Protocol):
    """Receives the terminal outcome of each unit of work."""

    def route(self, unit_of_work: Any, outcome: ProcessOutcome) -> None:
        ...


class LoggingOutcomeRouter:
    """Router that only records the relationship a unit of work went to."""

    def route(self, unit_of_work: Any, outcome: ProcessOutcome) -> None:
        relationship = REL_SUCCESS if outcome.success else REL_FAILURE
        if outcome.success:
            logger.info(f"Routing {unit_of_work!r} to {relationship}")
        else:
            logger.error(f"Routing {unit_of_work!r} to {relationship}: {outcome.error}")


class CallbackOutcomeRouter:
    """Router dispatching to one callback per relationship."""

    def __init__(
        self,
        on_success: Callable[[Any, ProcessOutcome], None],
        on_failure: Callable[[Any, ProcessOutcome], None],
    ):
        self.on_success = on_success
        self.on_failure = on_failure

    def route(self, unit_of_work: Any, outcome: ProcessOutcome) -> None:
        if outcome.status == Outcome.SUCCESS:
            self.on_success(unit_of_work, outcome)
        else:
            self.on_failure(unit_of_work, outcome)


def build_spark_launch(
    job: SparkJobDefinition,
    decision: SecurityDecision,
    submit_script: Optional[str] = None,
) -> LaunchSpec:
    """Translate a Spark job definition into a LaunchSpec."""
    builder = (
        SparkLauncherBuilder()
        .set_app_resource(job.app_jar)
        .set_main_class(job.main_class)
        .set_master(job.spark_master)
        .set_driver_memory(job.driver_memory)
        .set_number_of_executors(job.number_executors)
        .set_executor_memory(job.executor_memory)
        .set_executor_cores(job.executor_cores)
        .set_network_timeout(job.network_timeout)
        .set_spark_home(job.spark_home)
        .set_app_name(job.app_name)
    )
    if submit_script:
        builder.set_submit_script(submit_script)
    if decision.authenticated:
        builder.set_kerberos(decision.principal, decision.keytab)
    builder.add_app_args(job.main_args)
    return builder.build()


def build_sqoop_command(job: SqoopJobDefinition, defaults: Optional[Defaults] = None) -> RenderedCommand:
    """Translate a Sqoop job definition into a rendered command."""
    builder = SqoopBuilder(defaults)

    if job.source_driver is not None:
        builder.set_source_driver(job.source_driver)
    builder.set_source_connection_string(job.source_connection_string)
    builder.set_source_user_name(job.source_user_name)
    builder.set_password_mode(job.password_mode)
    if job.source_password_hdfs_file:
        builder.set_source_password_hdfs_file(job.source_password_hdfs_file)
    if job.source_password_passphrase is not None:
        builder.set_source_password_passphrase(job.source_password_passphrase.get_secret_value())
    if job.source_entered_password is not None:
        builder.set_source_entered_password(job.source_entered_password.get_secret_value())

    builder.set_source_table_name(job.source_table_name)
    builder.set_source_table_fields(job.source_table_fields)
    if job.source_table_where_clause is not None:
        builder.set_source_table_where_clause(job.source_table_where_clause)
    builder.set_source_load_strategy(job.source_load_strategy)
    if job.source_check_column_name is not None:
        builder.set_source_check_column_name(job.source_check_column_name)
    if job.source_check_column_last_value is not None:
        builder.set_source_check_column_last_value(job.source_check_column_last_value)
    if job.source_split_by_field is not None:
        builder.set_source_split_by_field(job.source_split_by_field)
    if job.source_boundary_query is not None:
        builder.set_source_boundary_query(job.source_boundary_query)

    builder.set_cluster_map_tasks(job.cluster_map_tasks)
    if job.cluster_ui_job_name is not None:
        builder.set_cluster_ui_job_name(job.cluster_ui_job_name)

    builder.set_target_hdfs_directory(job.target_hdfs_directory)
    builder.set_target_extract_data_format(job.target_extract_data_format)
    builder.set_target_hdfs_file_delimiter(job.target_hdfs_file_delimiter)
    builder.set_target_hive_delim_strategy(job.target_hive_delim_strategy)
    if job.target_hive_replace_delim is not None:
        builder.set_target_hive_replace_delim(job.target_hive_replace_delim)
    builder.set_target_hive_null_encoding_strategy(job.target_hive_null_encoding_strategy)
    builder.set_target_compression_algorithm(job.target_compression_algorithm)

    return builder.build()


class SparkJobRunner:
    """Runs Spark applications behind the security gate."""

    def __init__(
        self,
        gate: Optional[SecurityGate] = None,
        orchestrator: Optional[ProcessOrchestrator] = None,
        router: Optional[OutcomeRouter] = None,
        config_provider: Optional[ConfigProvider] = None,
    ):
        self.config_provider = config_provider or EnvConfigProvider()
        self.gate = gate or SecurityGate(
            HadoopSecuritySubsystem(self.config_provider.get_security_config())
        )
        self.orchestrator = orchestrator or ProcessOrchestrator()
        self.router = router or LoggingOutcomeRouter()

    def run(self, job: SparkJobDefinition, unit_of_work: Any = None) -> ProcessOutcome:
        """Run one Spark job and route its outcome. Never raises."""
        try:
            outcome = self._execute(job)
        except Exception as e:
            logger.error(f"Unable to execute Spark job: {e}")
            outcome = ProcessOutcome.failure(str(e))

        self.router.route(unit_of_work, outcome)
        return outcome

    def _execute(self, job: SparkJobDefinition) -> ProcessOutcome:
        decision = self.gate.evaluate(
            principal=job.kerberos_principal,
            keytab=job.kerberos_keytab,
            resources=job.hadoop_configuration_resources,
        )
        if not decision.proceed:
            return ProcessOutcome.failure(f"security check failed: {decision.reason}")

        submit_script = self.config_provider.get_spark_config().submit_script
        spec = build_spark_launch(job, decision, submit_script)
        return self.orchestrator.run(
            spec.to_argv(), spec.masked_argv(self.orchestrator.defaults.mask_string)
        )


class SqoopJobRunner:
    """Runs Sqoop imports."""

    def __init__(
        self,
        orchestrator: Optional[ProcessOrchestrator] = None,
        router: Optional[OutcomeRouter] = None,
        config: Optional[SqoopConfig] = None,
        defaults: Optional[Defaults] = None,
    ):
        self.config = config or EnvConfigProvider().get_sqoop_config()
        self.defaults = defaults or get_defaults()
        self.orchestrator = orchestrator or ProcessOrchestrator(defaults=self.defaults)
        self.router = router or LoggingOutcomeRouter()

    def run(self, job: SqoopJobDefinition, unit_of_work: Any = None) -> ProcessOutcome:
        """Run one Sqoop import and route its outcome. Never raises."""
        try:
            rendered = build_sqoop_command(job, self.defaults)
            argv = rendered.tokens()
            # The rendered command names the tool; run the configured binary
            argv[0] = self.config.binary
            masked = [self.config.binary, rendered.masked.split(" ", 1)[1]]
            outcome = self.orchestrator.run(argv, masked)
        except Exception as e:
            logger.error(f"Unable to execute Sqoop job: {e}")
            outcome = ProcessOutcome.failure(str(e))

        self.router.route(unit_of_work, outcome)
        return outcome
