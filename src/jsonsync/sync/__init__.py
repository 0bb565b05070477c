"""Synchronization layer: paging, merging and trigger routing into a target."""
