"""
Cache Monitoring Module

Prometheus instruments for cache lookups, computations and invalidations.
"""

from .cache_metrics import CacheMetricsRecorder

__all__ = ["CacheMetricsRecorder"]
