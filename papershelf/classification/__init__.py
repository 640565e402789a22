"""Tag / category classification core: codec, normalizer, index, search."""
