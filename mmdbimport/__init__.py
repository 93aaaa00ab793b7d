"""Import JSON records into MaxMind DB (MMDB) files, check inputs and inspect databases."""

__version__ = "0.1.0"
