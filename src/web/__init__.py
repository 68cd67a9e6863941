"""HTTP surface of the Pollution Report backend."""
