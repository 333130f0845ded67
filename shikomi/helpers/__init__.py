"""Console, configuration, prompt and Git helpers."""
