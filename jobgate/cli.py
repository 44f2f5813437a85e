"""
Command line entry point.

    jobgate spark job.yaml --attr feed=orders
    jobgate sqoop job.yaml
    jobgate render job.yaml
    jobgate encrypt-password --passphrase ...
"""

import os
import sys
from typing import Dict, Tuple

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from jobgate.config.provider import EnvConfigProvider
from jobgate.logging_config import configure_logging
from jobgate.modules.api import SparkJobDefinition, SqoopJobDefinition, load_job_definition
from jobgate.modules.credentials import encrypt_password
from jobgate.modules.executor import SparkJobRunner, SqoopJobRunner, build_sqoop_command

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_attributes(pairs: Tuple[str, ...]) -> Dict[str, str]:
    attributes = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected name=value, got {pair!r}", param_hint="--attr")
        name, value = pair.split("=", 1)
        attributes[name.strip()] = value
    return attributes


def _load(path: str, model, attributes: Tuple[str, ...], fallbacks=None):
    try:
        return load_job_definition(path, model, _parse_attributes(attributes), fallbacks)
    except (ValidationError, ValueError, OSError) as e:
        click.echo(f"Invalid job file {path}: {e}", err=True)
        sys.exit(EXIT_USAGE)


attr_option = click.option(
    "--attr", "attributes", multiple=True, help="Unit-of-work attribute as name=value"
)


@click.group()
@click.option("--log-level", default=None, help="Log level (default: JOBGATE_LOG_LEVEL or INFO)")
def main(log_level):
    """Launch external big-data jobs and report their outcome."""
    load_dotenv()
    configure_logging(log_level or os.environ.get("JOBGATE_LOG_LEVEL", "INFO"))


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@attr_option
def spark(job_file, attributes):
    """Run a Spark application described by JOB_FILE."""
    spark_config = EnvConfigProvider().get_spark_config()
    job = _load(
        job_file,
        SparkJobDefinition,
        attributes,
        {"spark_home": spark_config.spark_home, "spark_master": spark_config.master},
    )

    outcome = SparkJobRunner().run(job, unit_of_work=job_file)
    sys.exit(EXIT_SUCCESS if outcome.success else EXIT_FAILURE)


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@attr_option
def sqoop(job_file, attributes):
    """Run a Sqoop import described by JOB_FILE."""
    job = _load(job_file, SqoopJobDefinition, attributes)

    outcome = SqoopJobRunner().run(job, unit_of_work=job_file)
    sys.exit(EXIT_SUCCESS if outcome.success else EXIT_FAILURE)


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@attr_option
def render(job_file, attributes):
    """Print the masked Sqoop command for JOB_FILE without running it."""
    job = _load(job_file, SqoopJobDefinition, attributes)
    rendered = build_sqoop_command(job)

    click.echo(rendered.masked)
    for message in rendered.diagnostics:
        click.echo(f"warning: {message}", err=True)


@main.command("encrypt-password")
@click.option("--passphrase", prompt=True, hide_input=True, help="Passphrase the key is derived from")
@click.option("--password", prompt=True, hide_input=True, help="Clear text password to encrypt")
def encrypt_password_command(passphrase, password):
    """Encrypt a password for ENCRYPTED_TEXT_ENTRY mode."""
    try:
        click.echo(encrypt_password(password, passphrase))
    except ValueError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_USAGE)


if __name__ == "__main__":
    main()
