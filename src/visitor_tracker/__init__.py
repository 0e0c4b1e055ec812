"""Visitor Tracker - visit deduplication, enrichment and notification fan-out."""

__version__ = "0.1.0"
__author__ = "Visitor Tracker Team"
