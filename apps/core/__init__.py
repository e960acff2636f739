"""Shared building blocks for the PGConnect apps."""
