"""
Timers that turn editor activity into commit pipeline runs.
"""

from .activity import ActivityScheduler, DEFAULT_PERIOD, DEFAULT_INACTIVITY_DELAY

__all__ = ["ActivityScheduler", "DEFAULT_PERIOD", "DEFAULT_INACTIVITY_DELAY"]
