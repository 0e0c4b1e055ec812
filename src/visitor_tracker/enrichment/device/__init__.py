"""Device Parser - module init."""

from visitor_tracker.enrichment.device.parser import DeviceParser, detect_cpu, detect_engine

__all__ = ["DeviceParser", "detect_cpu", "detect_engine"]
