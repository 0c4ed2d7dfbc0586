"""Output layer — Rich console, progress handles, result formatting."""
