"""
File Upload Utility - Validate resumes attached to job applications.

Supported formats:
- PDF (.pdf)
- Word (.doc, .docx)

Max file size: RESUME_MAX_SIZE_MB (10MB by default)
"""

from typing import Tuple
from fastapi import UploadFile, HTTPException

from foresty.core.config import get_settings

ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_resume(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded resume.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (content, filename)

    Raises:
        HTTPException on validation errors
    """
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="Veuillez télécharger votre CV pour postuler")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Type de fichier '{ext or file.filename}' non pris en charge. Formats acceptés : PDF, DOC, DOCX"
        )

    max_mb = get_settings().resume_max_size_mb
    content = await file.read()

    if len(content) > max_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"Fichier trop volumineux. Taille maximale : {max_mb}MB"
        )

    if not content:
        raise HTTPException(status_code=400, detail="Le fichier est vide")

    return content, file.filename
