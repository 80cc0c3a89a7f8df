"""Error types and the mutation outcome taxonomy."""
