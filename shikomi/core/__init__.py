"""Collector, renderer and version engine."""
