"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each resource. Search, sort and
pagination of list endpoints are shared through BaseRepository.
"""
