"""Workflows built on the Bragg-edge extraction."""

from .temperature_scan import TemperatureScanConfig, TemperatureScanResult, run_temperature_scan

__all__ = ["TemperatureScanConfig", "TemperatureScanResult", "run_temperature_scan"]
