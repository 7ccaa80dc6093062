"""Fixed test data for the UI suite."""
