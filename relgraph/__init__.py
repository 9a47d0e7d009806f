"""Franchise relation graph for a personal media library."""
