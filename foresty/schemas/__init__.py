"""
Schemas module - form validation and record shapes for the page routes.
"""
