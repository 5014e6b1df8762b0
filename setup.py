from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/mqtt2influxdb").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".", exclude=["tests", "tests.*"])}

setup(
    name="mqtt2influxdb",
    version="0.1.0",
    description="Forward MQTT messages to InfluxDB 2 using declarative per-topic mapping rules",
    python_requires=">=3.9",
    include_package_data=True,
    install_requires=[
        "typer>=0.9",
        "PyYAML>=6.0",
        "pydantic>=2.0",
        "paho-mqtt>=2.0",
        "influxdb-client>=1.36",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "mqtt2influxdb=mqtt2influxdb.cli:app",
        ],
    },
    **pkg_args
)
