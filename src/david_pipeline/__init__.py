"""david-pipeline: functional annotation retrieval from the DAVID web service."""

__version__ = "0.1.0"
