"""Domain layer - entities, exceptions and repository ports."""
