"""Sealed proof artifacts and reports, an in-memory job store, and job API helpers."""

__version__ = "0.1.0"