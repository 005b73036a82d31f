#!/usr/bin/env python3
"""
Genetic Image Painter

Approximates a raw grayscale image (one byte per pixel, no header) with
randomized rectangle blends, by hill climbing or by population evolution.

Usage:
    python evolve_image.py <width> <height> <file> [--strategy population] [--generations 1000]
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from src.image_evolution import ConfigurationError, Raster, check_dimensions, create_search, rmse
from src.image_evolution.search import PopulationSearch, SearchStrategy
from src.diagnostics import (
    EvolutionVisualizer,
    format_timings,
    improvement_ratio,
    summarize_timings
)
from src.utils import default_config, load_config, setup_logger, validate_config


logger = logging.getLogger("evolve_image")


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the YAML config (or defaults) and apply command line overrides."""
    config = load_config(args.config) if args.config else default_config()

    overrides = {
        'strategy': args.strategy,
        'generations': args.generations,
        'seed': args.seed,
        'population_size': args.population_size,
        'cross_rate': args.cross_rate,
        'mutation_rate': args.mutation_rate
    }
    for key, value in overrides.items():
        if value is not None:
            config['evolution'][key] = value

    if args.output_dir is not None:
        config['output']['output_dir'] = args.output_dir
    if args.display_every is not None:
        config['output']['display_every'] = args.display_every

    return config


def strategy_params(config: Dict[str, Any]) -> Dict[str, Any]:
    """Keyword arguments for create_search from the evolution and image sections."""
    evolution = config['evolution']
    params = {
        'color_range': tuple(evolution.get('color_range', [0, 255])),
        'width_divider': config['image']['width_adjust_divider'],
        'height_divider': config['image']['height_adjust_divider']
    }
    if evolution['strategy'] == PopulationSearch.name:
        params.update({
            'population_size': evolution['population_size'],
            'cross_rate': evolution['cross_rate'],
            'mutation_rate': evolution['mutation_rate']
        })
    return params


def make_display(visualizer: Optional[EvolutionVisualizer], target: Raster):
    """
    Periodic display hook: logs progress and, when a visualizer is given,
    refreshes the comparison image with the current best raster.
    """
    reported = 0

    def display(search: SearchStrategy):
        nonlocal reported
        best = search.current_best()
        logger.info(
            "Generation %d: best score %d (rmse %.2f)",
            search.generation, search.best_score, rmse(best, target)
        )
        if isinstance(search, PopulationSearch):
            for index in range(reported, len(search.timings)):
                logger.debug(format_timings(index, search.timings[index]))
            reported = len(search.timings)
        if visualizer is not None:
            visualizer.plot_comparison(target, best, search.generation)

    return display


def run(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Validate the configuration, load the target and run the search.

    Raises:
        ConfigurationError: On invalid dimensions, configuration or input file
    """
    config = build_config(args)
    if not validate_config(config):
        raise ConfigurationError("Invalid configuration")

    image = config['image']
    check_dimensions(args.width, args.height,
                     image['width_adjust_divider'], image['height_adjust_divider'])

    target = Raster.from_file(args.file, args.width, args.height)
    logger.info(f"Loaded {args.width}x{args.height} target from {args.file}")

    evolution = config['evolution']
    rng = np.random.default_rng(evolution['seed'])
    search = create_search(evolution['strategy'], target, rng, **strategy_params(config))

    visualizer = None if args.no_plots else EvolutionVisualizer(config['output']['output_dir'])

    results = search.run(
        evolution['generations'],
        display_every=config['output']['display_every'],
        callback=make_display(visualizer, target),
        verbose=not args.quiet
    )

    logger.info(
        f"Final best score {results['best_fitness']} "
        f"({improvement_ratio(results['fitness_history']['best']):.1%} improvement)"
    )

    if isinstance(search, PopulationSearch) and search.timings:
        summary = summarize_timings(search.timings)
        logger.info(f"Mean generation time: {summary['generation']['mean'] * 1e3:.3f} ms")

    if visualizer is not None:
        visualizer.plot_comparison(target, results['best_raster'], search.generation)
        visualizer.plot_fitness_curves(results['fitness_history'])
        if isinstance(search, PopulationSearch):
            visualizer.plot_generation_timings(search.timings)
        logger.info(f"Plots written to {visualizer.output_dir}")

    return results


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Approximate a raw grayscale image by evolution')
    parser.add_argument('width', type=int, help='Image width in pixels')
    parser.add_argument('height', type=int, help='Image height in pixels')
    parser.add_argument('file', type=Path, help='Raw grayscale file, one byte per pixel')
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--strategy', choices=['hill_climb', 'population'],
                        help='Search strategy (default: population)')
    parser.add_argument('--generations', type=int, help='Number of generations to run')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--population-size', type=int, help='Candidates per generation')
    parser.add_argument('--cross-rate', type=float, help='Fraction of each generation produced by crossing')
    parser.add_argument('--mutation-rate', type=float, help='Probability of mutating a crossed child')
    parser.add_argument('--output-dir', help='Directory for plots')
    parser.add_argument('--display-every', type=int, help='Report progress every N generations')
    parser.add_argument('--no-plots', action='store_true', help='Do not write plots')
    parser.add_argument('--quiet', action='store_true', help='Hide the progress bar')
    parser.add_argument('--log-level', default='INFO', help='Logging level (default: INFO)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    setup_logger("evolve_image", args.log_level)
    setup_logger("src", args.log_level)

    start_time = time.time()

    try:
        run(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Total time: {time.time() - start_time:.1f} s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
