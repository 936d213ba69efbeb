"""
Task subsystem.

Components:
- models.py: data structures (Task, SubTask, Folder, Tag, Workspace), drafts/patches, JSON form
- task_store.py: tasks + subtasks, completion/status coupling, cascade hooks
- folder_store.py / tag_store.py / workspace_store.py: the other state slices
- query.py: pure read-side filters and groupings
- seed.py: first-run sample data
"""
