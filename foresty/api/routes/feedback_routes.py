"""
Feedback Routes

GET /feedback - Reviews, newest first
POST /feedback - Leave a review (anonymous when signed out)
"""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from foresty.core.auth import AuthContext, get_auth, get_user_db
from foresty.core.templating import render
from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import FeedbackCreate, form_errors
from foresty.services.feedback_service import list_feedback, submit_feedback
from foresty.utils.toasts import add_error, add_toast

log = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["Feedback"])


async def _render_feedback(request: Request, db: SupabaseClient, values: dict, errors: dict, status_code: int = 200):
    try:
        items = await list_feedback(db)
    except SupabaseError:
        log.exception("Error fetching feedback")
        add_error(request, "Erreur", "Impossible de charger les avis.")
        items = []
    return render(request, "feedback.html", {"items": items, "values": values, "errors": errors}, status_code=status_code)


@router.get("")
async def feedback_page(
    request: Request,
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    return await _render_feedback(request, db, {}, {})


@router.post("")
async def post_feedback(
    request: Request,
    rating: str = Form(""),
    message: str = Form(""),
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    values = {"rating": rating, "message": message}
    try:
        form = FeedbackCreate(**values)
    except ValidationError as e:
        errors = form_errors(e, FeedbackCreate)
        if "rating" in errors:
            add_error(request, "Veuillez donner une note", "Sélectionnez entre 1 et 5 étoiles pour soumettre votre avis.")
        return await _render_feedback(request, db, values, errors, status_code=400)

    try:
        await submit_feedback(db, form, auth.user_id)
    except SupabaseError as e:
        add_error(request, "Erreur", e.message or "Une erreur est survenue lors de la soumission de votre avis.")
        return await _render_feedback(request, db, values, {}, status_code=400)

    add_toast(request, "Merci pour votre avis !", "Votre commentaire a été soumis avec succès.")
    return RedirectResponse("/feedback", status_code=303)
