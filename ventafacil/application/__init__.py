"""Application layer - use cases, DTOs and the point-of-sale wiring."""
