"""logkeeper - age-based retention for log directories."""

__version__ = "0.1.0"
