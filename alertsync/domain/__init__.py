"""Domain layer: entities and error types shared by every other layer."""
