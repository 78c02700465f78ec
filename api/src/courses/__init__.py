"""Course content: modules and lessons."""
