"""Labeled console logging and the JSON Lines issue log."""
