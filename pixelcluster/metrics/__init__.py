from .timers import Timer
from .metrics import centroid_shift, within_cluster_sse, throughput

__all__ = [
    "Timer",
    "centroid_shift",
    "within_cluster_sse",
    "throughput",
]
