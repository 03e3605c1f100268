"""Infrastructure layer - storage and remote service adapters."""
