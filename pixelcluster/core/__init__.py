from .clusters import Cluster, ClusterSet
from .engine import ClusterEngine
from .errors import (
    ClusteringError,
    ConfigurationError,
    DimensionMismatchError,
    InvalidStateError,
    SamplingExhaustedError,
)
from .parallel import MultiprocessingConfig, ParallelClusterEngine
from .protocols import PassSampleSource, RandomSampleSource

__all__ = [
    "Cluster",
    "ClusterSet",
    "ClusterEngine",
    "ParallelClusterEngine",
    "MultiprocessingConfig",
    "PassSampleSource",
    "RandomSampleSource",
    "ClusteringError",
    "ConfigurationError",
    "DimensionMismatchError",
    "InvalidStateError",
    "SamplingExhaustedError",
]
