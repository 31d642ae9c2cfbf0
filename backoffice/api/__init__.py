"""Admin HTTP surface."""
