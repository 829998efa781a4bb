"""Reading activity heatmaps, statistics and adaptive reading challenges."""

__version__ = "0.1.0"
