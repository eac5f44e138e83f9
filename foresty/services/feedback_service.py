"""
Feedback Service - public reviews joined with the author's profile.
"""

from typing import Any, Dict, List, Optional

from foresty.db.supabase import SupabaseClient
from foresty.schemas.schemas import FeedbackCreate, FeedbackItem, UserRole
from foresty.utils.formatting import avatar_url, date_fr

ANONYMOUS = "Utilisateur anonyme"

FEEDBACK_COLUMNS = (
    "id,rating,message,created_at,user_id,"
    "profiles(first_name,last_name,user_type,avatar_url)"
)


def to_item(row: Dict[str, Any]) -> FeedbackItem:
    profile = row.get("profiles") or {}
    name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip() if profile else ""
    name = name or ANONYMOUS
    role = "Recruteur" if profile.get("user_type") == UserRole.job_poster.value else "Candidat"
    return FeedbackItem(
        id=str(row["id"]),
        rating=row.get("rating") or 0,
        message=row.get("message") or "",
        name=name,
        role=role,
        date=date_fr(row.get("created_at")),
        avatar=avatar_url(name, profile.get("avatar_url")),
    )


async def list_feedback(db: SupabaseClient) -> List[FeedbackItem]:
    rows = await db.select("feedback", FEEDBACK_COLUMNS, order="created_at", desc=True)
    return [to_item(row) for row in rows]


async def submit_feedback(db: SupabaseClient, form: FeedbackCreate, user_id: Optional[str]) -> None:
    await db.insert("feedback", {"rating": form.rating, "message": form.message, "user_id": user_id})
