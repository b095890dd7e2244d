"""Process and filesystem primitives."""
