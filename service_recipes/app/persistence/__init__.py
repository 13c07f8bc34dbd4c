"""
Persistence package for Recipes Service.
"""
