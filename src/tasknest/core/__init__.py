"""Core types shared by stores and connectors (ports, notices, app state)."""
