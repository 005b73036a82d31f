"""
Diagnostic Metrics for Image Evolution
Phase timings, convergence and population spread
"""

import numpy as np
from typing import Dict, List, Sequence

from ..image_evolution.search import GenerationTimings


def summarize_timings(timings: Sequence[GenerationTimings]) -> Dict[str, Dict[str, float]]:
    """
    Aggregate per-phase generation timings.

    Args:
        timings: Timings recorded by PopulationSearch

    Returns:
        Mapping phase -> {'mean', 'max', 'total'} in seconds, plus a
        'generation' entry for whole generations
    """
    if len(timings) == 0:
        return {}

    phases = list(timings[0].as_dict().keys())
    table = np.array([[t.as_dict()[phase] for phase in phases] for t in timings])

    summary = {}
    for i, phase in enumerate(phases):
        summary[phase] = {
            'mean': float(np.mean(table[:, i])),
            'max': float(np.max(table[:, i])),
            'total': float(np.sum(table[:, i]))
        }

    totals = table.sum(axis=1)
    summary['generation'] = {
        'mean': float(np.mean(totals)),
        'max': float(np.max(totals)),
        'total': float(np.sum(totals))
    }
    return summary


def format_timings(generation: int, timings: GenerationTimings) -> str:
    """One log line per generation: index followed by phase durations in microseconds."""
    values = " ".join(str(int(round(value * 1e6))) for value in timings.as_dict().values())
    return f"{generation}: {values}"


def improvement_ratio(best_history: List[float]) -> float:
    """
    Relative reduction of the best score over a run.

    Returns:
        (first - last) / first, 0.0 for empty or zero-start histories
    """
    if len(best_history) == 0 or best_history[0] == 0:
        return 0.0
    return float((best_history[0] - best_history[-1]) / best_history[0])


def stagnation_length(best_history: List[float]) -> int:
    """Number of trailing steps since the best score last improved."""
    if len(best_history) == 0:
        return 0

    count = 0
    last = best_history[-1]
    for value in reversed(best_history[:-1]):
        if value != last:
            break
        count += 1
    return count


def population_spread(scores: Sequence[float]) -> Dict[str, float]:
    """
    Spread of fitness values within one population.

    Args:
        scores: Fitness of every candidate

    Returns:
        Dictionary with best, worst, mean, std and number of distinct scores
    """
    values = np.asarray(scores, dtype=np.float64)
    if values.size == 0:
        return {'best': 0.0, 'worst': 0.0, 'mean': 0.0, 'std': 0.0, 'distinct': 0}

    return {
        'best': float(np.min(values)),
        'worst': float(np.max(values)),
        'mean': float(np.mean(values)),
        'std': float(np.std(values)),
        'distinct': int(len(np.unique(values)))
    }
