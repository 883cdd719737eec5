"""Open Banking payment initiation with Strong Customer Authentication."""

__version__ = "0.1.0"
