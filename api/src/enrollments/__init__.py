"""Enrollments and coarse course progress."""
