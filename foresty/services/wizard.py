"""
Post-job wizard state.

The draft (step index, fields, preview flag) is held in process memory under
a random id; only that id goes into the session cookie. Nothing is sent to
the backend until the last step is submitted.
"""

import secrets
from collections import OrderedDict
from typing import Any, Dict, Mapping, MutableMapping, Optional

from pydantic import ValidationError

from foresty.schemas.schemas import JobCreate, JobDescriptionStep, JobDetailsStep, form_errors
from foresty.services.job_service import PREVIEW_JOB_ID

WIZARD_KEY = "job_draft"
LAST_STEP = 3
MAX_DRAFTS = 1000

STEP_SCHEMAS = {
    1: JobDetailsStep,
    2: JobDescriptionStep,
}

EMPTY_DRAFT = {
    "title": "",
    "company": "",
    "location": "",
    "type": "",
    "salary": "",
    "description": "",
    "requirements": "",
}


class DraftStore:
    """In-memory drafts keyed by id; the least recently used one is evicted past max_size."""

    def __init__(self, max_size: int = MAX_DRAFTS):
        self.max_size = max_size
        self._drafts: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._drafts)

    def get(self, draft_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not isinstance(draft_id, str) or draft_id not in self._drafts:
            return None
        self._drafts.move_to_end(draft_id)
        return self._drafts[draft_id]

    def put(self, draft_id: str, state: Dict[str, Any]) -> None:
        self._drafts[draft_id] = state
        self._drafts.move_to_end(draft_id)
        while len(self._drafts) > self.max_size:
            self._drafts.popitem(last=False)

    def discard(self, draft_id: Optional[str]) -> None:
        if isinstance(draft_id, str):
            self._drafts.pop(draft_id, None)


# Global instance
drafts = DraftStore()


class JobPostingWizard:
    def __init__(self, step: int = 1, data: Dict[str, str] = None, preview: bool = False):
        self.step = max(1, min(LAST_STEP, int(step)))
        self.data = {**EMPTY_DRAFT, **(data or {})}
        self.preview = preview

    @classmethod
    def from_session(cls, session: Mapping[str, Any], store: DraftStore = drafts) -> "JobPostingWizard":
        state = store.get(session.get(WIZARD_KEY)) or {}
        return cls(state.get("step", 1), state.get("data"), state.get("preview", False))

    def save(self, session: MutableMapping[str, Any], store: DraftStore = drafts) -> None:
        draft_id = session.get(WIZARD_KEY)
        if not isinstance(draft_id, str):
            draft_id = secrets.token_urlsafe(16)
        store.put(draft_id, {"step": self.step, "data": dict(self.data), "preview": self.preview})
        session[WIZARD_KEY] = draft_id

    @staticmethod
    def clear(session: MutableMapping[str, Any], store: DraftStore = drafts) -> None:
        store.discard(session.pop(WIZARD_KEY, None))

    @property
    def is_last_step(self) -> bool:
        return self.step == LAST_STEP

    def merge(self, values: Mapping[str, Any]) -> None:
        """Copy submitted values for known fields into the draft."""
        for key in EMPTY_DRAFT:
            if key in values and values[key] is not None:
                self.data[key] = str(values[key])

    def advance(self, values: Mapping[str, Any]) -> Dict[str, str]:
        """Validate the current step; move forward when it passes. Returns field errors."""
        self.merge(values)
        schema = STEP_SCHEMAS.get(self.step)
        if schema is not None:
            try:
                schema(**{name: self.data.get(name) for name in schema.model_fields})
            except ValidationError as e:
                return form_errors(e, schema)
        self.step = min(LAST_STEP, self.step + 1)
        return {}

    def back(self, values: Mapping[str, Any]) -> None:
        self.merge(values)
        self.step = max(1, self.step - 1)

    def toggle_preview(self) -> None:
        self.preview = not self.preview

    def to_job(self) -> JobCreate:
        return JobCreate(**self.data)

    def preview_job(self) -> Dict[str, Any]:
        """Card data for the preview; the id keeps it out of view counting."""
        return {
            **self.data,
            "id": PREVIEW_JOB_ID,
            "company": self.data["company"] or "Votre entreprise",
            "title": self.data["title"] or "Titre du poste",
            "location": self.data["location"] or "Lieu",
            "type": self.data["type"] or "full-time",
            "created_at": None,
            "views": 0,
            "applications": 0,
        }
