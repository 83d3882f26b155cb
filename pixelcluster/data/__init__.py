from .scene import NO_LABEL, Scene, load_scene
from .sources import ArraySampleSource, RandomPixelSampler, SequenceSampleSource
from .synthetic import SyntheticScene, generate_scene
from .validation import valid_rows, validate_samples

__all__ = [
    "Scene",
    "NO_LABEL",
    "load_scene",
    "ArraySampleSource",
    "RandomPixelSampler",
    "SequenceSampleSource",
    "SyntheticScene",
    "generate_scene",
    "valid_rows",
    "validate_samples",
]
