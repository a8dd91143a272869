"""Reusable patterns shared by feature packages.

Currently the async repository base with unit-of-work sessions and a
single storage-error channel.
"""
