"""
Infrastructure Layer - External Systems Integration

Contains:
- sources: NewsData.io search API, RSS/Atom feeds, link extraction and resolution
- store: RSS article store (interface + in-memory implementation), feed catalogue
- cache: recent-article cache and cache metadata
"""
