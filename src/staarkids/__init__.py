"""STAAR Kids - practice question backend for grades 3-5."""

__version__ = "0.1.0"
