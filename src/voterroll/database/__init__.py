"""Storage layer: schema, engine bootstrap and collection handles."""
