"""
Image Evolution Module
Approximates a grayscale target raster through randomized search
"""

from .errors import ImageEvolutionError, ConfigurationError, ShapeMismatchError
from .raster import Raster, check_dimensions, minimum_size
from .fitness import score, rmse, similarity, max_score
from .operators import Edit, mutate, mate, size_ranges
from .search import (
    Candidate,
    GenerationTimings,
    SearchStrategy,
    HillClimbSearch,
    PopulationSearch,
    SEARCH_STRATEGIES,
    create_search,
    crossover_split
)

__all__ = [
    'ImageEvolutionError',
    'ConfigurationError',
    'ShapeMismatchError',
    'Raster',
    'check_dimensions',
    'minimum_size',
    'score',
    'rmse',
    'similarity',
    'max_score',
    'Edit',
    'mutate',
    'mate',
    'size_ranges',
    'Candidate',
    'GenerationTimings',
    'SearchStrategy',
    'HillClimbSearch',
    'PopulationSearch',
    'SEARCH_STRATEGIES',
    'create_search',
    'crossover_split'
]
