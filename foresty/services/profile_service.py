"""
Profile Service - profile page data and edits.

Skills, experience and education are saved by replacing the whole set:
delete the user's rows, then insert the new list.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from foresty.db.supabase import SupabaseClient
from foresty.schemas.schemas import ProfileSettingsForm

log = logging.getLogger(__name__)

EXPERIENCE_FIELDS = ("title", "company", "location", "start_date", "end_date", "description")
EDUCATION_FIELDS = ("degree", "institution", "location", "year")


@dataclass
class ProfileView:
    profile: Dict[str, Any]
    skills: List[str] = field(default_factory=list)
    experience: List[Dict[str, Any]] = field(default_factory=list)
    education: List[Dict[str, Any]] = field(default_factory=list)
    social_links: Dict[str, str] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        name = f"{self.profile.get('first_name') or ''} {self.profile.get('last_name') or ''}".strip()
        return name or "Utilisateur"


async def load_profile(db: SupabaseClient, profile_id: str) -> Optional[ProfileView]:
    """Everything the profile page shows, or None when the profile does not exist."""
    profile = await db.select("profiles", filters={"id": profile_id}, single=True)
    if not profile:
        return None

    links = await db.select("social_links", "platform,url", filters={"profile_id": profile_id})
    return ProfileView(
        profile=profile,
        skills=await list_skills(db, profile_id),
        experience=await list_experience(db, profile_id),
        education=await list_education(db, profile_id),
        social_links={link["platform"].lower(): link["url"] for link in links if link.get("platform")},
    )


async def list_skills(db: SupabaseClient, profile_id: str) -> List[str]:
    rows = await db.select("profile_skills", "skills(name)", filters={"profile_id": profile_id})
    return [row["skills"]["name"] for row in rows if row.get("skills")]


async def list_experience(db: SupabaseClient, profile_id: str) -> List[Dict[str, Any]]:
    return await db.select("experience", filters={"profile_id": profile_id}, order="start_date", desc=True)


async def list_education(db: SupabaseClient, profile_id: str) -> List[Dict[str, Any]]:
    return await db.select("education", filters={"profile_id": profile_id}, order="year", desc=True)


def is_own_profile(user_id: Optional[str], profile_id: Optional[str] = None) -> bool:
    """/profile is always the caller's own; /profile/{id} only when the ids match."""
    return user_id is not None and user_id == (profile_id or user_id)


# ============================================================
# SKILLS
# ============================================================

def add_skill(skills: List[str], name: str) -> List[str]:
    name = name.strip()
    if not name or name in skills:
        return list(skills)
    return [*skills, name]


def remove_skill(skills: List[str], name: str) -> List[str]:
    return [s for s in skills if s != name]


async def replace_skills(db: SupabaseClient, profile_id: str, skills: List[str]) -> None:
    await db.delete("profile_skills", filters={"profile_id": profile_id})

    links = []
    for name in skills:
        skill = await db.select("skills", "id", filters={"name": name}, single=True)
        if not skill:
            inserted = await db.insert("skills", {"name": name})
            skill = inserted[0]
        links.append({"profile_id": profile_id, "skill_id": skill["id"]})

    if links:
        await db.insert("profile_skills", links)


# ============================================================
# EXPERIENCE / EDUCATION
# ============================================================

def upsert_entry(entries: List[Dict[str, Any]], entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Replace the entry with the same id, or append it."""
    entry_id = entry.get("id")
    if entry_id and any(str(e.get("id")) == str(entry_id) for e in entries):
        return [entry if str(e.get("id")) == str(entry_id) else e for e in entries]
    return [*entries, entry]


def remove_entry(entries: List[Dict[str, Any]], entry_id: str) -> List[Dict[str, Any]]:
    return [e for e in entries if str(e.get("id")) != str(entry_id)]


async def _replace_rows(db: SupabaseClient, table: str, profile_id: str, entries, fields) -> None:
    await db.delete(table, filters={"profile_id": profile_id})
    rows = [
        {**{f: (entry.get(f) or None) for f in fields}, "profile_id": profile_id}
        for entry in entries
    ]
    if rows:
        await db.insert(table, rows)


async def replace_experience(db: SupabaseClient, profile_id: str, entries: List[Dict[str, Any]]) -> None:
    await _replace_rows(db, "experience", profile_id, entries, EXPERIENCE_FIELDS)


async def replace_education(db: SupabaseClient, profile_id: str, entries: List[Dict[str, Any]]) -> None:
    await _replace_rows(db, "education", profile_id, entries, EDUCATION_FIELDS)


# ============================================================
# ABOUT / SETTINGS
# ============================================================

async def update_about(db: SupabaseClient, profile_id: str, about: str) -> None:
    await db.update("profiles", {"about": about}, filters={"id": profile_id})


async def update_settings(db: SupabaseClient, profile_id: str, form: ProfileSettingsForm) -> None:
    values = {
        "first_name": form.first_name,
        "last_name": form.last_name,
        "title": form.title,
        "location": form.location,
        "phone": form.phone,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    await db.update("profiles", values, filters={"id": profile_id})
    log.info("Profile %s settings updated", profile_id)
