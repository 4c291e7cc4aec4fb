"""photojob — supervise an external photo transformation tool, one job at a time."""

__version__ = "0.1.0"
