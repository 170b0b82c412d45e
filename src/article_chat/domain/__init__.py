"""Domain layer: entities, ports and the pure conversation policies."""
