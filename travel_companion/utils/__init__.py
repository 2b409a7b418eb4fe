"""
Utility functions for Travel Companion
"""

from .cost_estimator import CostEstimate, CostParams, estimate_trip_cost

__all__ = [
    'CostParams',
    'CostEstimate',
    'estimate_trip_cost',
]
