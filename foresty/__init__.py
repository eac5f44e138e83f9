"""
Foresty (فرصتي)
Job board for the forestry sector in Tunisia.

Architecture:
- Hosted backend: auth, tables and rpc (all persistence lives there)
- FastAPI: page routes, form validation, session/role resolution
- Jinja2: server-rendered pages
"""

__version__ = "1.0.0"
