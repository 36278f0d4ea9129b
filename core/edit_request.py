"""
Recognises requests to edit a pending scheduled message.

    cambiar el mensaje del doctor por llamar al dentista mañana 11:00
    modificar el mensaje del cumpleaños para el viernes 09:00

The words before " por " pick the message; what follows is the new content,
date/time and phone. Without " por " the whole text both picks the message
and carries the new date/time or phone, and the content is kept.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from core.models import ScheduledJob

_EDIT_VERB = re.compile(
    r"^\s*(?:cambiar|cambia|modificar|modifica|actualizar|actualiza|editar|edita|corregir|corrige)(?!\w)",
    re.IGNORECASE,
)
_SEPARATOR = re.compile(r"\s+por\s+", re.IGNORECASE)
_WORD = re.compile(r"\w+")

_STOPWORDS = frozenset({
    "el", "la", "los", "las", "un", "una", "mi", "mis",
    "mensaje", "mensajes", "para", "que", "dice",
    "de", "del", "a", "al", "en", "con", "y",
})


@dataclass(frozen=True)
class EditRequest:
    selector: str
    changes: str
    replaces_content: bool


def is_edit_request(text: str) -> bool:
    return bool(_EDIT_VERB.match(text))


def parse_edit_request(text: str) -> EditRequest:
    """Split an edit request into the part that picks a job and the new values."""
    body = _EDIT_VERB.sub("", text, count=1).strip()
    parts = _SEPARATOR.split(body, maxsplit=1)
    if len(parts) == 2:
        return EditRequest(selector=parts[0], changes=parts[1], replaces_content=True)
    return EditRequest(selector=body, changes=body, replaces_content=False)


def _words(text: str) -> set[str]:
    return {w for w in _WORD.findall(text.lower()) if w not in _STOPWORDS}


def select_job(selector: str, jobs: Iterable[ScheduledJob]) -> ScheduledJob | None:
    """
    Job whose content shares the most words with the selector.

    Ties go to the earliest job in `jobs`; None when no job shares a word.
    """
    wanted = _words(selector)
    best, best_score = None, 0
    for job in jobs:
        score = len(wanted & _words(job.content))
        if score > best_score:
            best, best_score = job, score
    return best
