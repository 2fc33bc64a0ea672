"""Domain entities, aggregates and value objects."""
