"""songcheck infrastructure layer: storage, cache, connectors and CLI."""
