"""Storage layer implementations."""
