"""
Diagnostics Module
Run metrics and visualization tools
"""

from .metrics import (
    summarize_timings,
    format_timings,
    improvement_ratio,
    stagnation_length,
    population_spread
)
from .visualizer import EvolutionVisualizer

__all__ = [
    'summarize_timings',
    'format_timings',
    'improvement_ratio',
    'stagnation_length',
    'population_spread',
    'EvolutionVisualizer'
]
