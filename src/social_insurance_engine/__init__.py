"""Japanese social insurance premium and determination engine."""

__version__ = "0.1.0"
