"""AED inventory core: status derivation and offline-first synchronization."""

__version__ = "1.0.0"
