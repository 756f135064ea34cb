"""Orchestration layer sequencing the chart workflow."""

from graphify.orchestration.controller import PipelineController
from graphify.orchestration.notifier import LoggingNotifier, Notifier

__all__ = [
    "LoggingNotifier",
    "Notifier",
    "PipelineController",
]
