"""Composition root for wiring dependencies.

This package centralizes infrastructure-aware wiring so API, worker and
script entry points depend on ports without importing infrastructure
directly.
"""
