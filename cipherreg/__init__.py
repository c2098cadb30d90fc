"""Encrypted patient-case registry client."""

__version__ = "0.1.0"
