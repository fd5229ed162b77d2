"""
Top-level package for the voter-quiz candidate matching engine.

This package contains modules for mapping quiz questions, candidate
positions and user answers into typed records, scoring candidates
against a completed quiz (per-candidate baselines, per-question rank
points and three scoring pathways), auditing the engine for fairness
and coverage, and serving a small match API.  There are no side effects
on import beyond reading configuration from the environment.
"""

from .matching import calculate_matches

__all__ = ["calculate_matches"]
