"""Persistence adapters for the SnapshotStorage port."""
