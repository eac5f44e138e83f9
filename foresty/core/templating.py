"""
Template rendering - Jinja2 environment plus the context every page needs
(auth state, navigation, pending toasts).
"""

import os
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from foresty.core.auth import AuthContext
from foresty.core.config import get_settings
from foresty.schemas.schemas import JOB_TYPE_LABELS, UserRole
from foresty.utils.formatting import avatar_url, date_fr, posted_ago
from foresty.utils.toasts import pop_toasts

PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATES_DIR = os.path.join(PACKAGE_DIR, "templates")
STATIC_DIR = os.path.join(PACKAGE_DIR, "static")

templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["job_type_label"] = lambda value: JOB_TYPE_LABELS.get(value, value)
templates.env.filters["date_fr"] = date_fr
templates.env.filters["posted_ago"] = posted_ago
templates.env.filters["zip_pairs"] = lambda items: [(item, item) for item in items]
templates.env.globals["avatar_url"] = avatar_url

# restricted: None (everyone), "not-job-seeker", "admin"
NAV_LINKS = [
    {"label": "Publier une offre", "href": "/post-job", "restricted": "not-job-seeker"},
    {"label": "Chercher un emploi", "href": "/find-job", "restricted": None},
    {"label": "À propos", "href": "/about", "restricted": None},
    {"label": "Tarifs", "href": "/pricing", "restricted": "not-job-seeker"},
    {"label": "Avis", "href": "/feedback", "restricted": None},
    {"label": "Dashboard", "href": "/admin/dashboard", "restricted": "admin"},
]


def nav_links(auth: AuthContext) -> List[Dict[str, str]]:
    links = []
    for link in NAV_LINKS:
        restricted = link["restricted"]
        if restricted == "not-job-seeker" and auth.role == UserRole.job_seeker.value:
            continue
        if restricted == "admin" and not auth.is_admin:
            continue
        links.append(link)
    return links


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
):
    auth = getattr(request.state, "auth", None) or AuthContext()
    page = {
        "app_name": get_settings().app_name,
        "auth": auth,
        "nav_links": nav_links(auth),
        "toasts": pop_toasts(request),
        "current_path": request.url.path,
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code, headers=headers)
