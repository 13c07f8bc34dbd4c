"""
Cache package for Recipes Service.

Provides a Redis-backed cache that stores the serialized recipe listing
until a write invalidates it.
"""
