"""
Prometheus metrics for scope validation.
"""

from .collector import ValidationMetrics

__all__ = ['ValidationMetrics']
