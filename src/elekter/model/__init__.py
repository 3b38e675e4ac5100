"""Schedule planning."""
