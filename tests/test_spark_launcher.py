#!/usr/bin/env python3
"""
Tests for the Spark launch spec builder.
"""

import os

import pytest

from jobgate.modules.builder import LaunchSpec, SparkLauncherBuilder


def base_builder() -> SparkLauncherBuilder:
    return (
        SparkLauncherBuilder()
        .set_spark_home("/opt/spark")
        .set_app_resource("/jobs/app.jar")
        .set_main_class("com.example.Main")
        .set_master("yarn")
        .set_app_name("nightly")
    )


class TestSparkLauncherBuilder:
    """Test SparkLauncherBuilder."""

    def test_minimal_argv(self):
        """Test argv layout without settings or arguments."""
        spec = base_builder().build()

        assert spec.to_argv() == [
            os.path.join("/opt/spark", "bin", "spark-submit"),
            "--master", "yarn",
            "--class", "com.example.Main",
            "--name", "nightly",
            "/jobs/app.jar",
        ]

    def test_resource_settings_become_conf(self):
        """Test memory, executor and timeout settings."""
        spec = (
            base_builder()
            .set_driver_memory("1g")
            .set_executor_memory("2g")
            .set_number_of_executors("3")
            .set_executor_cores("4")
            .set_network_timeout("120s")
            .build()
        )

        assert dict(spec.conf) == {
            "spark.driver.memory": "1g",
            "spark.executor.memory": "2g",
            "spark.executor.instances": "3",
            "spark.executor.cores": "4",
            "spark.network.timeout": "120s",
        }
        argv = spec.to_argv()
        assert "spark.network.timeout=120s" in argv
        assert argv[argv.index("spark.network.timeout=120s") - 1] == "--conf"

    def test_app_args_split_on_every_comma(self):
        """Test arguments are split verbatim with no escaping."""
        spec = base_builder().add_app_args("a,b c,,d").build()

        assert spec.app_args == ("a", "b c", "", "d")
        assert spec.to_argv()[-4:] == ["a", "b c", "", "d"]

    def test_empty_app_args(self):
        spec = base_builder().add_app_args("").add_app_args(None).build()
        assert spec.app_args == ()

    def test_kerberos_settings_only_when_set(self):
        """Test keytab and principal are added through set_kerberos."""
        plain = base_builder().build()
        secured = base_builder().set_kerberos("etl@EXAMPLE.COM", "/etc/etl.keytab").build()

        assert "spark.yarn.keytab" not in plain.conf
        assert secured.conf["spark.yarn.keytab"] == "/etc/etl.keytab"
        assert secured.conf["spark.yarn.principal"] == "etl@EXAMPLE.COM"

    def test_masked_argv_hides_keytab(self):
        spec = base_builder().set_kerberos("etl@EXAMPLE.COM", "/etc/etl.keytab").build()

        masked = spec.masked_argv()
        assert "spark.yarn.keytab=*****" in masked
        assert "spark.yarn.principal=etl@EXAMPLE.COM" in masked
        assert "spark.yarn.keytab=/etc/etl.keytab" in spec.to_argv()

    def test_spec_is_immutable(self):
        """Test the built spec cannot be changed afterwards."""
        builder = base_builder().set_driver_memory("1g")
        spec = builder.build()
        builder.set_driver_memory("8g")

        assert spec.conf["spark.driver.memory"] == "1g"
        with pytest.raises(TypeError):
            spec.conf["spark.driver.memory"] = "4g"
        with pytest.raises(AttributeError):
            spec.master = "local"

    def test_build_is_deterministic(self):
        builder = base_builder().set_executor_cores("2").add_app_args("x,y")
        assert builder.build() == builder.build()

    def test_missing_required_settings(self):
        """Test build refuses an incomplete launch."""
        with pytest.raises(ValueError, match="main_class"):
            SparkLauncherBuilder().set_spark_home("/opt/spark").set_app_resource("a.jar").set_master("local").build()

    def test_custom_submit_script(self):
        spec = base_builder().set_submit_script("bin/spark-submit2").build()
        assert spec.submit_path == os.path.join("/opt/spark", "bin/spark-submit2")

    def test_launch_spec_defaults(self):
        spec = LaunchSpec(spark_home="/s", app_resource="a.jar", main_class="M", master="local")
        assert spec.to_argv() == [os.path.join("/s", "bin", "spark-submit"), "--master", "local", "--class", "M", "a.jar"]
