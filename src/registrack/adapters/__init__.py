"""Adapters - infrastructure implementations of the core protocols."""
