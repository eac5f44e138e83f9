"""
Admin Service - users table, filters and dashboard stats.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from foresty.db.supabase import SupabaseClient
from foresty.schemas.schemas import AdminStats, AdminUserRow, JobStatus, UserRole, UserStatus
from foresty.services.job_service import ALL
from foresty.utils.formatting import parse_datetime


def to_user_row(profile: Dict[str, Any]) -> AdminUserRow:
    name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    return AdminUserRow(
        id=str(profile["id"]),
        name=name or "Utilisateur",
        email=profile.get("email") or "",
        type=profile.get("user_type") or UserRole.job_seeker.value,
        status=profile.get("status") or UserStatus.active.value,
        created_at=parse_datetime(profile.get("created_at")),
    )


async def list_users(db: SupabaseClient) -> List[AdminUserRow]:
    profiles = await db.select("profiles", order="created_at", desc=True)
    return [to_user_row(p) for p in profiles]


def filter_users(
    users: Iterable[AdminUserRow],
    search: str = "",
    status: str = ALL,
    user_type: str = ALL,
) -> List[AdminUserRow]:
    search = search.strip().lower()
    results = []
    for user in users:
        if search and search not in user.name.lower() and search not in user.email.lower():
            continue
        if status and status != ALL and user.status != status:
            continue
        if user_type and user_type != ALL and user.type != user_type:
            continue
        results.append(user)
    return results


def _this_month(value: Any, now: datetime) -> bool:
    dt = parse_datetime(value)
    return dt is not None and dt.year == now.year and dt.month == now.month


def compute_stats(
    users: List[AdminUserRow],
    jobs: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> AdminStats:
    now = now or datetime.now(timezone.utc)
    return AdminStats(
        total_users=len(users),
        total_jobs=len(jobs),
        active_jobs=sum(1 for j in jobs if j.get("status") == JobStatus.active.value),
        total_applications=sum(int(j.get("applications") or 0) for j in jobs),
        new_users_this_month=sum(1 for u in users if _this_month(u.created_at, now)),
        new_jobs_this_month=sum(1 for j in jobs if _this_month(j.get("created_at"), now)),
    )


async def delete_user(db: SupabaseClient, user_id: str) -> None:
    await db.delete("profiles", filters={"id": user_id})
