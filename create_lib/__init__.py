"""create-lib -- scaffold a new library from a template repository."""

__version__ = "0.1.0"
