"""
Profile Routes

GET /profile - Own profile (sign-in required)
GET /profile/{profile_id} - Public profile
POST /profile/{profile_id}/about - Update the about section
POST /profile/{profile_id}/skills - Add or remove a skill
POST /profile/{profile_id}/experience - Add or edit an experience entry
POST /profile/{profile_id}/experience/{entry_id}/delete - Remove an experience entry
POST /profile/{profile_id}/education - Add or edit an education entry
POST /profile/{profile_id}/education/{entry_id}/delete - Remove an education entry
POST /profile/{profile_id}/settings - Update name, title, location, phone

Edits are only accepted on the signed-in user's own profile.
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from foresty.core.auth import AuthContext, get_auth, get_user_db
from foresty.core.guard import get_current_user
from foresty.core.templating import render
from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import (
    GOVERNORATES, EducationEntry, ExperienceEntry, ProfileSettingsForm, form_errors
)
from foresty.services import profile_service
from foresty.utils.toasts import add_error, add_toast

log = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


async def _render_profile(
    request: Request,
    db: SupabaseClient,
    auth: AuthContext,
    profile_id: str,
    errors: Optional[Dict[str, Dict[str, str]]] = None,
    values: Optional[Dict[str, dict]] = None,
    status_code: int = 200,
):
    try:
        view = await profile_service.load_profile(db, profile_id)
    except SupabaseError:
        log.exception("Error fetching profile %s", profile_id)
        add_error(request, "Échec du chargement des données de profil")
        return render(request, "profile_not_found.html", status_code=503)

    if view is None:
        return render(request, "profile_not_found.html", status_code=404)

    return render(request, "profile.html", {
        "view": view,
        "profile_id": profile_id,
        "editable": profile_service.is_own_profile(auth.user_id, profile_id),
        "errors": errors or {},
        "values": values or {},
        "governorates": GOVERNORATES,
    }, status_code=status_code)


def _require_owner(auth: AuthContext, profile_id: str) -> None:
    if not profile_service.is_own_profile(auth.user_id, profile_id):
        raise HTTPException(status_code=403, detail="Vous ne pouvez modifier que votre propre profil")


def _back(profile_id: str) -> RedirectResponse:
    return RedirectResponse(f"/profile/{profile_id}", status_code=303)


@router.get("")
async def my_profile(
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    return await _render_profile(request, db, auth, auth.user_id)


@router.get("/{profile_id}")
async def public_profile(
    request: Request,
    profile_id: str,
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    return await _render_profile(request, db, auth, profile_id)


@router.post("/{profile_id}/about")
async def update_about(
    request: Request,
    profile_id: str,
    about: str = Form(""),
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    try:
        await profile_service.update_about(db, profile_id, about.strip())
        add_toast(request, "Section À propos mise à jour")
    except SupabaseError:
        log.exception("Error updating about for %s", profile_id)
        add_error(request, "Échec de la mise à jour de la section À propos")
    return _back(profile_id)


@router.post("/{profile_id}/skills")
async def update_skills(
    request: Request,
    profile_id: str,
    name: str = Form(""),
    action: str = Form("add"),
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    try:
        current = await profile_service.list_skills(db, profile_id)
        if action == "remove":
            skills = profile_service.remove_skill(current, name)
        else:
            skills = profile_service.add_skill(current, name)
        if skills != current:
            await profile_service.replace_skills(db, profile_id, skills)
        add_toast(request, "Compétences mises à jour")
    except SupabaseError:
        log.exception("Error updating skills for %s", profile_id)
        add_error(request, "Échec de la mise à jour des compétences")
    return _back(profile_id)


@router.post("/{profile_id}/experience")
async def save_experience(
    request: Request,
    profile_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    values = dict(await request.form())
    try:
        entry = ExperienceEntry(**values)
    except ValidationError as e:
        return await _render_profile(
            request, db, auth, profile_id,
            errors={"experience": form_errors(e, ExperienceEntry)},
            values={"experience": values}, status_code=400,
        )

    try:
        current = await profile_service.list_experience(db, profile_id)
        entries = profile_service.upsert_entry(current, entry.model_dump())
        await profile_service.replace_experience(db, profile_id, entries)
        add_toast(request, "Expérience mise à jour")
    except SupabaseError:
        log.exception("Error updating experience for %s", profile_id)
        add_error(request, "Échec de la mise à jour de l'expérience")
    return _back(profile_id)


@router.post("/{profile_id}/experience/{entry_id}/delete")
async def delete_experience(
    request: Request,
    profile_id: str,
    entry_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    try:
        current = await profile_service.list_experience(db, profile_id)
        await profile_service.replace_experience(db, profile_id, profile_service.remove_entry(current, entry_id))
        add_toast(request, "Expérience mise à jour")
    except SupabaseError:
        log.exception("Error deleting experience for %s", profile_id)
        add_error(request, "Échec de la mise à jour de l'expérience")
    return _back(profile_id)


@router.post("/{profile_id}/education")
async def save_education(
    request: Request,
    profile_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    values = dict(await request.form())
    try:
        entry = EducationEntry(**values)
    except ValidationError as e:
        return await _render_profile(
            request, db, auth, profile_id,
            errors={"education": form_errors(e, EducationEntry)},
            values={"education": values}, status_code=400,
        )

    try:
        current = await profile_service.list_education(db, profile_id)
        entries = profile_service.upsert_entry(current, entry.model_dump())
        await profile_service.replace_education(db, profile_id, entries)
        add_toast(request, "Formation mise à jour")
    except SupabaseError:
        log.exception("Error updating education for %s", profile_id)
        add_error(request, "Échec de la mise à jour de la formation")
    return _back(profile_id)


@router.post("/{profile_id}/education/{entry_id}/delete")
async def delete_education(
    request: Request,
    profile_id: str,
    entry_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    try:
        current = await profile_service.list_education(db, profile_id)
        await profile_service.replace_education(db, profile_id, profile_service.remove_entry(current, entry_id))
        add_toast(request, "Formation mise à jour")
    except SupabaseError:
        log.exception("Error deleting education for %s", profile_id)
        add_error(request, "Échec de la mise à jour de la formation")
    return _back(profile_id)


@router.post("/{profile_id}/settings")
async def update_settings(
    request: Request,
    profile_id: str,
    auth: AuthContext = Depends(get_current_user),
    db: SupabaseClient = Depends(get_user_db),
):
    _require_owner(auth, profile_id)
    values = dict(await request.form())
    try:
        form = ProfileSettingsForm(**values)
    except ValidationError as e:
        return await _render_profile(
            request, db, auth, profile_id,
            errors={"settings": form_errors(e, ProfileSettingsForm)},
            values={"settings": values}, status_code=400,
        )

    try:
        await profile_service.update_settings(db, profile_id, form)
        add_toast(request, "Profil mis à jour")
    except SupabaseError:
        log.exception("Error updating settings for %s", profile_id)
        add_error(request, "Échec de la mise à jour du profil")
    return _back(profile_id)
