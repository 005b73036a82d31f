"""
Diagnostic Visualizer
Renders the target next to the current best raster and plots run history
"""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
from typing import Dict, List, Optional, Sequence
from pathlib import Path

from ..image_evolution.raster import Raster
from ..image_evolution.search import GenerationTimings


class EvolutionVisualizer:
    """
    Visualization tools for image evolution runs.
    """

    def __init__(self, output_dir: str = "painter_output"):
        """
        Initialize visualizer.

        Args:
            output_dir: Directory to save plots
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def side_by_side(target: Raster, best: Raster) -> np.ndarray:
        """
        Target on the left, best candidate on the right, as one RGBA image.

        Returns:
            (height, 2 * width, 4) uint8 array
        """
        return np.concatenate([target.to_rgba(), best.to_rgba()], axis=1)

    def plot_comparison(self, target: Raster, best: Raster, generation: int = 0,
                        filename: str = 'comparison.png') -> Path:
        """
        Save the target and current best side by side.

        Args:
            target: Target raster
            best: Best raster found so far
            generation: Generation shown in the title
            filename: Output file name

        Returns:
            Path of the saved image
        """
        fig, ax = plt.subplots(figsize=(8, 4))
        ax.imshow(self.side_by_side(target, best), interpolation='nearest')
        ax.set_title(f'Genetic Image Painter - generation {generation}')
        ax.axis('off')

        path = self.output_dir / filename
        fig.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path

    def plot_fitness_curves(self, history: Dict[str, List[float]],
                            filename: str = 'fitness_curves.png') -> Path:
        """
        Plot best and average fitness per generation.

        Args:
            history: {'best': [...], 'average': [...]}
            filename: Output file name
        """
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.plot(history['best'], label='Best', color='blue')
        if history.get('average'):
            ax.plot(history['average'], label='Average', color='orange', alpha=0.7)

        ax.set_title('Fitness (sum of squared differences)')
        ax.set_xlabel('Generation')
        ax.set_ylabel('Score')
        if min(history['best'], default=0) > 0:
            ax.set_yscale('log')
        ax.legend()
        ax.grid(True, alpha=0.3)

        path = self.output_dir / filename
        fig.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path

    def plot_generation_timings(self, timings: Sequence[GenerationTimings],
                                filename: str = 'generation_timings.png') -> Optional[Path]:
        """
        Stacked per-phase durations of every generation.

        Returns:
            Path of the saved plot, or None when there are no timings
        """
        if len(timings) == 0:
            return None

        phases = list(timings[0].as_dict().keys())
        table = np.array([[t.as_dict()[phase] * 1e3 for phase in phases] for t in timings])

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.stackplot(np.arange(len(timings)), table.T, labels=phases)
        ax.set_title('Generation Phase Timings')
        ax.set_xlabel('Generation')
        ax.set_ylabel('Milliseconds')
        ax.legend(loc='upper right')
        ax.grid(True, alpha=0.3)

        path = self.output_dir / filename
        fig.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path
