"""Output layer: Rich and JSON rendering of result envelopes."""
