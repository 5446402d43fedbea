"""
Storelens Orchestrator Module
=============================

Process entry points and shared runtime setup.

Components:
    - cli: command-line runner for the tools
    - logging_config: console / JSON / rotating-file logging

Usage:
    python -m src.orchestrator.cli tools
"""

from .logging_config import JSONFormatter, setup_logging

__all__ = [
    "JSONFormatter",
    "setup_logging",
]
