"""Data access layer: cache stores, cache-aside and the issue/workflow repositories."""
