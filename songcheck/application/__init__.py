"""songcheck application layer."""
