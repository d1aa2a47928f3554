"""Discover and load YAML test suites, and evaluate assertions on rendered resources."""

__version__ = "0.1.0"