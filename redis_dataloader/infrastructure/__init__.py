"""Infrastructure layer: store handles and the cache-fill pipeline."""
