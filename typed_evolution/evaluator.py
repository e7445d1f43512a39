"""
typed_evolution/evaluator.py - Per-pixel evaluation and rendering of genomes
"""
import logging
from typing import Any, Dict, List, Tuple

import numpy as np
from PIL import Image

from .context import EMPTY_HISTORY, ComputeContext, CoordinateSet
from .datatypes import BitColor, Boolean, ModularInt, SNFloat, UNFloat
from .genome import Genome

logger = logging.getLogger(__name__)

# Families whose outputs map onto a pixel value
RENDERABLE_FAMILIES = ('Boolean', 'Nibble', 'Byte', 'UInt', 'SInt', 'UNFloat', 'SNFloat', 'BitColor')


def to_unit(value: Any) -> float:
    """Map any scalar node output onto [0, 1]"""
    if isinstance(value, Boolean):
        return 1.0 if value.into_inner() else 0.0
    if isinstance(value, ModularInt):
        return (value.into_inner() - value.LOW) / (value.MODULUS - 1)
    if isinstance(value, UNFloat):
        return value.into_inner()
    if isinstance(value, SNFloat):
        return value.to_unsigned().into_inner()
    if isinstance(value, BitColor):
        return value.into_inner() / 7.0
    raise ValueError(f"Cannot map {type(value).__name__} onto a pixel value")


class Evaluator:
    """Walks a genome over a pixel grid, keeping a rolling frame history"""

    def __init__(self, history_frames: int = 4):
        self.history_frames = max(history_frames, 1)
        self.history = EMPTY_HISTORY

    def reset(self) -> None:
        self.history = EMPTY_HISTORY

    def create_coordinate_grids(self, size: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
        """Create coordinate grids for evaluation"""
        height, width = size
        x = np.linspace(-1, 1, width)
        y = np.linspace(-1, 1, height)
        X, Y = np.meshgrid(x, y)
        return X, Y

    def evaluate_genome(self, genome: Genome, size: Tuple[int, int] = (64, 64),
                        t: float = 0.0) -> Dict[str, np.ndarray]:
        """Compute every channel at every pixel, as floats in [0, 1]"""
        X, Y = self.create_coordinate_grids(size)
        result = {channel: np.zeros_like(X) for channel in genome.trees}
        history = self.history

        for row in range(X.shape[0]):
            for col in range(X.shape[1]):
                coords = CoordinateSet.from_floats(X[row, col], Y[row, col], t)
                context = ComputeContext(coords, history)
                for channel, value in genome.compute(context).items():
                    result[channel][row, col] = to_unit(value)
        return result

    def _rgb_array(self, genome: Genome, data: Dict[str, np.ndarray]) -> np.ndarray:
        if 'color' in data and genome.trees['color'].family == 'BitColor':
            indices = np.rint(data['color'] * 7).astype(np.uint8)
            rgb = np.stack([(indices >> bit) & 1 for bit in range(3)], axis=-1)
            return (rgb * 255).astype(np.uint8)

        missing = [channel for channel in ('r', 'g', 'b') if channel not in data]
        if missing:
            raise ValueError(f"Genome has no {', '.join(missing)} channel(s) to render")
        return np.stack(
            [np.rint(np.clip(data[channel], 0, 1) * 255).astype(np.uint8) for channel in ('r', 'g', 'b')],
            axis=-1,
        )

    def render_frame(self, genome: Genome, size: Tuple[int, int] = (64, 64),
                     t: float = 0.0) -> Image.Image:
        """Render one frame and push its luminance into the history"""
        data = self.evaluate_genome(genome, size, t)
        rgb_array = self._rgb_array(genome, data)
        luminance = rgb_array.astype(np.float64).mean(axis=-1) / 255.0
        self.history = self.history.pushed(luminance, self.history_frames)
        genome.update_recursively(ComputeContext(CoordinateSet.from_floats(0.0, 0.0, t), self.history))
        return Image.fromarray(rgb_array, 'RGB')

    def render_image(self, genome: Genome, size: Tuple[int, int] = (256, 256),
                     t: float = 0.0, filename: str = None) -> Image.Image:
        img = self.render_frame(genome, size, t)
        if filename:
            img.save(filename)
        return img

    def create_animation_frames(self, genome: Genome, num_frames: int = 30,
                                size: Tuple[int, int] = (64, 64), t_start: float = 0.0) -> List[Image.Image]:
        """One frame per tick; each frame sees the previous ones through the history"""
        frames = []
        for tick in range(num_frames):
            frames.append(self.render_frame(genome, size, t_start + tick))
            logger.debug("Rendered frame %d/%d", tick + 1, num_frames)
        return frames

