"""Drive UMDH heap snapshots and filter, sort and summarise leak reports."""

__version__ = "1.0.0"
__all__ = ["__version__"]