"""Local user profiles."""
