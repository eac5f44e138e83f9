"""
Database module - hosted backend client.
"""
from foresty.db.supabase import SupabaseClient, SupabaseError, get_supabase, close_supabase

__all__ = [
    "SupabaseClient",
    "SupabaseError",
    "get_supabase",
    "close_supabase"
]
