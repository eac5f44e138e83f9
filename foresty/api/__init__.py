"""
API module - page routes.
"""
