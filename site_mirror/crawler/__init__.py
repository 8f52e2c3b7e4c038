# site_mirror/crawler/__init__.py
"""Fetching side of SiteMirror: transport, worker pool and their data models."""
