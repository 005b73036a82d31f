"""
Tests for the Search Strategies
"""

import math
import pytest
import numpy as np
from src.image_evolution.raster import Raster
from src.image_evolution.errors import ConfigurationError
from src.image_evolution.fitness import score
from src.image_evolution.operators import mate
from src.image_evolution.search import (
    HillClimbSearch,
    PopulationSearch,
    SearchStrategy,
    create_search,
    crossover_split
)


WHITE_4X4_START = 4 * 4 * 255 * 255


@pytest.fixture
def white_target():
    return Raster.blank(4, 4, 255)


@pytest.fixture
def gradient_target():
    return Raster(16, 12, np.tile(np.arange(16, dtype=np.uint8) * 16, 12))


def test_crossover_split_defaults():
    """Test 100 candidates at cross rate 0.98 split into 9 survivors and 13 crossed."""
    cross_count, survivors_count = crossover_split(100, 0.98)

    assert cross_count == 13
    assert survivors_count == 9
    assert survivors_count + cross_count * (cross_count + 1) // 2 == 100


@pytest.mark.parametrize("population_size,cross_rate", [
    (1, 0.98), (2, 0.5), (10, 1.0), (21, 1.0), (50, 0.3), (100, 0.0), (1000, 0.98)
])
def test_crossover_split_is_maximal(population_size, cross_rate):
    """Test the cross count is the largest fitting triangular number."""
    cross_count, survivors_count = crossover_split(population_size, cross_rate)
    budget = population_size * cross_rate

    assert cross_count * (cross_count + 1) // 2 <= budget
    assert (cross_count + 1) * (cross_count + 2) // 2 > budget
    assert survivors_count + cross_count * (cross_count + 1) // 2 == population_size


def test_crossover_split_exact_triangular():
    """Test exact triangular budgets use every slot for children."""
    assert crossover_split(10, 1.0) == (4, 0)
    assert crossover_split(21, 1.0) == (6, 0)


def test_hill_climb_initial_state(white_target):
    """Test hill climbing starts from the scored black raster."""
    search = HillClimbSearch(white_target, np.random.default_rng(0))

    assert search.best_score == WHITE_4X4_START
    assert np.all(search.current_best().pixels == 0)
    assert search.generation == 0


def test_hill_climb_never_regresses(gradient_target):
    """Test the best score is non-increasing across steps."""
    search = HillClimbSearch(gradient_target, np.random.default_rng(1))

    previous = search.best_score
    for _ in range(300):
        search.step()
        assert search.best_score <= previous
        assert score(search.current_best(), gradient_target) == search.best_score
        previous = search.best_score

    assert search.generation == 300


def test_hill_climb_improves_white_target(white_target):
    """Test hill climbing moves a black raster toward white."""
    search = HillClimbSearch(white_target, np.random.default_rng(2))

    results = search.run(500, verbose=False)

    assert results['best_fitness'] < WHITE_4X4_START
    assert search.accepted > 0
    history = results['fitness_history']['best']
    assert len(history) == 500
    assert all(b <= a for a, b in zip(history, history[1:]))


def test_population_initialization(white_target):
    """Test the initial population is scored, sorted and diverse."""
    search = PopulationSearch(white_target, np.random.default_rng(3))

    assert len(search.population) == 100
    scores = search.scores()
    assert all(not math.isinf(s) for s in scores)
    assert scores == sorted(scores)
    assert len(set(scores)) > 1
    assert search.cross_count == 13
    assert search.survivors_count == 9


def test_population_step_invariants(gradient_target):
    """Test size and ordering hold after every generation."""
    search = PopulationSearch(gradient_target, np.random.default_rng(4), population_size=30)

    for generation in range(25):
        search.step()
        scores = search.scores()

        assert len(search.population) == 30
        assert scores == sorted(scores)
        assert search.generation == generation + 1
        for candidate in search.population:
            assert candidate.fitness == score(candidate.raster, gradient_target)

    assert len(search.timings) == 25
    assert all(t.total >= 0 for t in search.timings)


def test_population_best_never_regresses(gradient_target):
    """Test elitism keeps the best score non-increasing."""
    search = PopulationSearch(gradient_target, np.random.default_rng(5))

    previous = search.best_score
    for _ in range(30):
        search.step()
        assert search.best_score <= previous
        previous = search.best_score


def test_population_survivors_are_carried_unchanged(gradient_target):
    """Test survivors keep their rasters and scores."""
    search = PopulationSearch(gradient_target, np.random.default_rng(6))
    survivors = [(c.raster.copy(), c.fitness) for c in search.population[:search.survivors_count]]

    search.step()

    for raster, fitness in survivors:
        assert any(c.raster == raster and c.fitness == fitness for c in search.population)


def test_population_parents_not_mutated(gradient_target):
    """Test mutation only touches freshly crossed children."""
    search = PopulationSearch(gradient_target, np.random.default_rng(7), mutation_rate=1.0)
    parents = [c.raster.copy() for c in search.population]
    parent_objects = [c.raster for c in search.population]

    search.step()

    for original, raster in zip(parents, parent_objects):
        assert raster == original


def test_population_improves_white_target(white_target):
    """Test the population moves toward an all-white target."""
    search = PopulationSearch(white_target, np.random.default_rng(8))
    start = search.best_score

    results = search.run(200, verbose=False)

    assert results['best_fitness'] < WHITE_4X4_START
    assert results['best_fitness'] < start
    assert results['generations'] == 200
    assert len(results['fitness_history']['average']) == 200


def test_population_reproducible(gradient_target):
    """Test equal seeds give equal runs."""
    a = PopulationSearch(gradient_target, np.random.default_rng(9), population_size=20)
    b = PopulationSearch(gradient_target, np.random.default_rng(9), population_size=20)

    a.run(10, verbose=False)
    b.run(10, verbose=False)

    assert a.scores() == b.scores()
    assert a.current_best() == b.current_best()


@pytest.mark.parametrize("params", [
    {'population_size': 0},
    {'cross_rate': 1.5},
    {'mutation_rate': -0.1}
])
def test_population_rejects_bad_parameters(white_target, params):
    """Test invalid rates and sizes are configuration errors."""
    with pytest.raises(ConfigurationError):
        PopulationSearch(white_target, np.random.default_rng(0), **params)


def test_search_rejects_small_target():
    """Test a 3x3 target is a configuration error."""
    with pytest.raises(ConfigurationError):
        HillClimbSearch(Raster(3, 3))
    with pytest.raises(ConfigurationError):
        PopulationSearch(Raster(3, 3))


def test_run_invokes_display_callback(white_target):
    """Test the display callback fires every display_every steps."""
    search = HillClimbSearch(white_target, np.random.default_rng(10))
    seen = []

    search.run(10, display_every=3, callback=lambda s: seen.append(s.generation), verbose=False)

    assert seen == [3, 6, 9]


def test_create_search(white_target):
    """Test strategies are built by name."""
    rng = np.random.default_rng(11)

    assert isinstance(create_search('hill_climb', white_target, rng), HillClimbSearch)
    population = create_search('population', white_target, rng, population_size=10)
    assert isinstance(population, PopulationSearch)
    assert isinstance(population, SearchStrategy)
    assert len(population.population) == 10

    with pytest.raises(ConfigurationError):
        create_search('annealing', white_target, rng)


def test_population_rejects_too_few_parents(white_target):
    """Test a cross rate needing more parents than candidates is rejected."""
    with pytest.raises(ConfigurationError):
        PopulationSearch(white_target, np.random.default_rng(0), population_size=1, cross_rate=1.0)


def test_population_single_candidate_keeps_size(white_target):
    """Test a one-candidate population survives unchanged each generation."""
    search = PopulationSearch(white_target, np.random.default_rng(0), population_size=1)
    before = search.best_score

    search.step()

    assert len(search.population) == 1
    assert search.best_score == before


@pytest.mark.parametrize("color_range", [(300, 300), (-1, 10), (200, 100)])
def test_search_rejects_bad_color_range(white_target, color_range):
    """Test blend colors outside 0..255 are configuration errors."""
    with pytest.raises(ConfigurationError):
        HillClimbSearch(white_target, np.random.default_rng(0), color_range=color_range)
    with pytest.raises(ConfigurationError):
        create_search('population', white_target, np.random.default_rng(0), color_range=color_range)


def test_population_mutates_every_child_and_no_survivor(gradient_target):
    """Test mutation starts at the first crossed child and skips survivors."""
    search = PopulationSearch(gradient_target, np.random.default_rng(12), mutation_rate=1.0)
    survivors = [c.raster for c in search.population[:search.survivors_count]]
    mutated = []
    original_mutate = search._mutate

    def recording_mutate(raster):
        mutated.append(raster)
        original_mutate(raster)

    search._mutate = recording_mutate
    search.step()

    children = search.cross_count * (search.cross_count + 1) // 2
    assert len(mutated) == children == 91
    assert not any(raster is survivor for raster in mutated for survivor in survivors)


def test_population_mutation_starts_at_first_child(gradient_target):
    """Test the first raster mutated is the cross of the top two candidates."""
    search = PopulationSearch(gradient_target, np.random.default_rng(13), mutation_rate=1.0)
    first, second = search.population[0].raster, search.population[1].raster
    crossed = []
    original_mutate = search._mutate

    def recording_mutate(raster):
        if not crossed:
            crossed.append(raster.copy())
        original_mutate(raster)

    search._mutate = recording_mutate
    search.step()

    assert crossed[0] == mate(first, second)


if __name__ == "__main__":
    pytest.main([__file__])
