"""tasknest: workspaces, folders, tags and tasks with subtasks, persisted locally."""

__version__ = "0.1.0"
