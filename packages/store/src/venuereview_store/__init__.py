"""Snapshot persistence for venues and reviews."""
