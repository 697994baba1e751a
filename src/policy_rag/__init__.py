"""Retrieval-augmented question answering over a university policy corpus."""

__version__ = "0.2.0"
