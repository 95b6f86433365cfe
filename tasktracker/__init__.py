"""Task tracking backend: tasks, assignments and role-based access control."""
