"""Search configuration for path discovery."""

from dataclasses import dataclass

from .graph.search import DEFAULT_MAX_HOPS, DEFAULT_TOP_K, EARLY_STOP_FACTOR


@dataclass
class DiscoveryConfig:
    """Tunables for path discovery.

    Attributes:
        max_hops: Maximum edges per path (default 4)
        top_k: Maximum paths returned (default 5)
        early_stop_factor: Stop searching after early_stop_factor * top_k
            paths have been found (default 2)
    """

    max_hops: int = DEFAULT_MAX_HOPS
    top_k: int = DEFAULT_TOP_K
    early_stop_factor: int = EARLY_STOP_FACTOR

    def __post_init__(self):
        """Validate configuration."""
        for name in ("max_hops", "top_k", "early_stop_factor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be int")
            if value <= 0:
                raise ValueError(f"{name} must be positive integer")
