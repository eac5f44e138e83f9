"""
Toast notifications - queued in the session, shown once on the next render.
"""

from typing import Dict, List

from fastapi import Request

TOASTS_KEY = "toasts"


def add_toast(request: Request, title: str, description: str = "", variant: str = "default") -> None:
    """variant is "default" or "destructive"."""
    queue = request.session.get(TOASTS_KEY, [])
    queue.append({"title": title, "description": description, "variant": variant})
    request.session[TOASTS_KEY] = queue


def add_error(request: Request, title: str, description: str = "") -> None:
    add_toast(request, title, description, variant="destructive")


def pop_toasts(request: Request) -> List[Dict[str, str]]:
    return request.session.pop(TOASTS_KEY, [])
