"""Platform health statistics for Linux hosts: CPU, memory and hwmon power rails."""

__version__ = "0.3.0"
