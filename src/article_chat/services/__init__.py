"""Infrastructure services: completion providers and the conversation store."""
