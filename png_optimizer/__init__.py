"""Mirror an image tree as optimized PNGs using a pool of worker threads."""

__version__ = "1.0.0"
