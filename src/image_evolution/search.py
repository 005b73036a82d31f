"""
Image Evolution Search Engine
Hill-climbing and population-based strategies for approximating a target raster
"""

import logging
import math
import time
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Callable, Dict, List, Optional, Tuple
from tqdm import tqdm

from .errors import ConfigurationError
from .fitness import score
from .operators import COLOR_RANGE, check_color_range, mate, mutate, size_ranges
from .raster import Raster, WIDTH_ADJUST_DIVIDER, HEIGHT_ADJUST_DIVIDER, check_dimensions


logger = logging.getLogger(__name__)

POPULATION_SIZE = 100
CROSS_RATE = 0.98
MUTATION_RATE = 0.4


def crossover_split(population_size: int, cross_rate: float) -> Tuple[int, int]:
    """
    Split a generation into survivors and crossed children.

    Crossing the top n+1 candidates pairwise yields n(n+1)/2 children, so n
    is the largest integer with n(n+1)/2 <= population_size * cross_rate,
    i.e. the floored positive root of n^2 + n - 2*population_size*cross_rate.

    Args:
        population_size: Candidates per generation
        cross_rate: Fraction of the generation produced by crossing

    Returns:
        (cross_count, survivors_count)
    """
    budget = population_size * cross_rate
    cross_count = int((math.sqrt(8 * budget + 1) - 1) / 2)

    # Correct float error around exact triangular numbers
    while (cross_count + 1) * (cross_count + 2) // 2 <= budget:
        cross_count += 1
    while cross_count > 0 and cross_count * (cross_count + 1) // 2 > budget:
        cross_count -= 1

    survivors_count = population_size - cross_count * (cross_count + 1) // 2

    assert survivors_count + cross_count * (cross_count + 1) // 2 == population_size
    return cross_count, survivors_count


@dataclass
class Candidate:
    """A raster and its fitness; fitness is inf until scored."""
    raster: Raster
    fitness: float = math.inf

    def rescore(self, target: Raster) -> float:
        self.fitness = score(self.raster, target)
        return self.fitness


@dataclass
class GenerationTimings:
    """Seconds spent in each phase of one population generation."""
    create: float = 0.0
    copy: float = 0.0
    cross: float = 0.0
    mutate: float = 0.0
    rescore: float = 0.0
    sort: float = 0.0

    @property
    def total(self) -> float:
        return self.create + self.copy + self.cross + self.mutate + self.rescore + self.sort

    def as_dict(self) -> Dict[str, float]:
        return {
            'create': self.create,
            'copy': self.copy,
            'cross': self.cross,
            'mutate': self.mutate,
            'rescore': self.rescore,
            'sort': self.sort
        }


class SearchStrategy(ABC):
    """
    Common interface of the search strategies.

    Subclasses implement step() and current_best(); run() drives them and
    records fitness history.
    """

    name = "base"

    def __init__(
        self,
        target: Raster,
        rng: Optional[np.random.Generator] = None,
        color_range: Tuple[int, int] = COLOR_RANGE,
        width_divider: int = WIDTH_ADJUST_DIVIDER,
        height_divider: int = HEIGHT_ADJUST_DIVIDER
    ):
        """
        Initialize search state shared by all strategies.

        Args:
            target: Raster to approximate
            rng: Random generator used for every random draw
            color_range: Inclusive range of mutation blend colors
            width_divider: Max edit width is target.width // width_divider
            height_divider: Max edit height is target.height // height_divider
        """
        check_dimensions(target.width, target.height, width_divider, height_divider)
        try:
            check_color_range(color_range)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.target = target
        self.rng = rng if rng is not None else np.random.default_rng()
        self.color_range = tuple(color_range)
        self.width_range, self.height_range = size_ranges(
            target.width, target.height, width_divider, height_divider
        )

        self.generation = 0
        self.best_fitness_history: List[float] = []
        self.avg_fitness_history: List[float] = []

    def _mutate(self, raster: Raster):
        mutate(raster, self.rng, self.color_range, self.width_range, self.height_range)

    def _blank(self) -> Raster:
        return Raster.blank(self.target.width, self.target.height)

    @abstractmethod
    def step(self):
        """Advance the search by one iteration."""

    @abstractmethod
    def current_best(self) -> Raster:
        """Best raster found so far."""

    @property
    @abstractmethod
    def best_score(self) -> float:
        """Fitness of current_best()."""

    def average_score(self) -> float:
        return self.best_score

    def run(
        self,
        generations: int,
        display_every: int = 0,
        callback: Optional[Callable[["SearchStrategy"], None]] = None,
        verbose: bool = True
    ) -> Dict:
        """
        Run several steps.

        Args:
            generations: Number of step() calls
            display_every: Invoke callback every this many steps (0 disables)
            callback: Receives the strategy, e.g. to render current_best()
            verbose: Whether to show progress

        Returns:
            Dictionary with search results
        """
        if verbose:
            pbar = tqdm(total=generations, desc=f"Evolving ({self.name})")

        for gen in range(generations):
            self.step()

            self.best_fitness_history.append(self.best_score)
            self.avg_fitness_history.append(self.average_score())

            if callback is not None and display_every > 0 and (gen + 1) % display_every == 0:
                callback(self)

            if verbose:
                pbar.set_postfix({
                    'best': self.best_score,
                    'avg': f"{self.average_score():.1f}"
                })
                pbar.update(1)

        if verbose:
            pbar.close()

        return {
            'best_raster': self.current_best(),
            'best_fitness': self.best_score,
            'fitness_history': {
                'best': self.best_fitness_history,
                'average': self.avg_fitness_history
            },
            'generations': self.generation
        }


class HillClimbSearch(SearchStrategy):
    """
    Single-candidate greedy search.

    Mutates a copy of the current best and keeps it only on strict
    improvement.
    """

    name = "hill_climb"

    def __init__(self, target: Raster, rng: Optional[np.random.Generator] = None, **kwargs):
        super().__init__(target, rng, **kwargs)

        self._best = self._blank()
        self._score = score(self._best, self.target)
        self.accepted = 0

        logger.info(
            "Hill climbing on %dx%d target, initial score %d",
            target.width, target.height, self._score
        )

    def step(self):
        scratch = self._best.copy()
        self._mutate(scratch)
        new_score = score(scratch, self.target)

        if new_score < self._score:
            self._best = scratch
            self._score = new_score
            self.accepted += 1

        self.generation += 1

    def current_best(self) -> Raster:
        return self._best

    @property
    def best_score(self) -> float:
        return self._score


class PopulationSearch(SearchStrategy):
    """
    Ranked-population search.

    Each generation keeps the top survivors unchanged, fills the rest by
    crossing every pair among the top cross_count + 1 candidates, mutates
    crossed children with probability mutation_rate, rescores and sorts.
    """

    name = "population"

    def __init__(
        self,
        target: Raster,
        rng: Optional[np.random.Generator] = None,
        population_size: int = POPULATION_SIZE,
        cross_rate: float = CROSS_RATE,
        mutation_rate: float = MUTATION_RATE,
        **kwargs
    ):
        """
        Initialize population search.

        Args:
            target: Raster to approximate
            rng: Random generator
            population_size: Number of candidates per generation
            cross_rate: Fraction of each generation produced by crossing
            mutation_rate: Probability of mutating a crossed child
            **kwargs: Passed to SearchStrategy
        """
        if population_size < 1:
            raise ConfigurationError(f"population_size must be positive, got {population_size}")
        if not 0.0 <= cross_rate <= 1.0:
            raise ConfigurationError(f"cross_rate must be in [0, 1], got {cross_rate}")
        if not 0.0 <= mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be in [0, 1], got {mutation_rate}")

        super().__init__(target, rng, **kwargs)

        self.population_size = population_size
        self.cross_rate = cross_rate
        self.mutation_rate = mutation_rate
        self.cross_count, self.survivors_count = crossover_split(population_size, cross_rate)
        if self.cross_count + 1 > population_size:
            raise ConfigurationError(
                f"cross_rate {cross_rate} needs {self.cross_count + 1} parents "
                f"but population_size is {population_size}"
            )

        self.population: List[Candidate] = []
        self.timings: List[GenerationTimings] = []

        self._initialize_population()

        logger.info(
            "Population of %d on %dx%d target: %d survivors, crossing top %d",
            population_size, target.width, target.height,
            self.survivors_count, self.cross_count + 1
        )

    def _initialize_population(self):
        """Start from black rasters, mutate each once, score and rank."""
        self.population = []
        for _ in range(self.population_size):
            raster = self._blank()
            self._mutate(raster)
            candidate = Candidate(raster)
            candidate.rescore(self.target)
            self.population.append(candidate)

        self.population.sort(key=attrgetter('fitness'))

    def step(self):
        timings = GenerationTimings()
        start = time.perf_counter()

        new_gen: List[Candidate] = []
        created = time.perf_counter()
        timings.create = created - start

        # Survivors keep their scores from the previous ranking
        new_gen.extend(self.population[:self.survivors_count])
        copied = time.perf_counter()
        timings.copy = copied - created

        partners = self.population[:self.cross_count + 1]
        for i, parent in enumerate(partners):
            for partner in partners[i + 1:]:
                new_gen.append(Candidate(mate(parent.raster, partner.raster)))
        crossed = time.perf_counter()
        timings.cross = crossed - copied

        children = new_gen[self.survivors_count:]
        for child in children:
            if self.rng.random() < self.mutation_rate:
                self._mutate(child.raster)
        mutated = time.perf_counter()
        timings.mutate = mutated - crossed

        for child in children:
            child.rescore(self.target)
        rescored = time.perf_counter()
        timings.rescore = rescored - mutated

        new_gen.sort(key=attrgetter('fitness'))
        timings.sort = time.perf_counter() - rescored

        self.population = new_gen
        self.timings.append(timings)

        logger.debug("Generation %d: best %s", self.generation, self.best_score)
        self.generation += 1

    def current_best(self) -> Raster:
        return self.population[0].raster

    @property
    def best_score(self) -> float:
        return self.population[0].fitness

    def average_score(self) -> float:
        return float(np.mean([candidate.fitness for candidate in self.population]))

    def scores(self) -> List[float]:
        return [candidate.fitness for candidate in self.population]


SEARCH_STRATEGIES = {
    HillClimbSearch.name: HillClimbSearch,
    PopulationSearch.name: PopulationSearch
}


def create_search(
    strategy: str,
    target: Raster,
    rng: Optional[np.random.Generator] = None,
    **params
) -> SearchStrategy:
    """
    Build a search strategy by name.

    Args:
        strategy: One of SEARCH_STRATEGIES
        target: Raster to approximate
        rng: Random generator
        **params: Strategy parameters

    Returns:
        Strategy instance
    """
    if strategy not in SEARCH_STRATEGIES:
        raise ConfigurationError(
            f"Unknown strategy '{strategy}', expected one of {sorted(SEARCH_STRATEGIES)}"
        )
    return SEARCH_STRATEGIES[strategy](target, rng, **params)
