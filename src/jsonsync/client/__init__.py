"""HTTP layer: one ResourceClient per REST resource path."""
