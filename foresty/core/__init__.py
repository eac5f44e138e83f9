"""
Core module - settings, session/role resolution and route guards.
"""
