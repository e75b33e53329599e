"""Hit logging and counting services sharing one storage abstraction."""

__version__ = "1.0.0"
