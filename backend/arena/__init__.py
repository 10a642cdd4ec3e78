"""Arena battle backend."""
