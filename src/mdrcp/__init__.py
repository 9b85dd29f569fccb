"""Deploy locally-built Cargo executables, updating mdrcp itself safely."""

__version__ = "0.4.0"
