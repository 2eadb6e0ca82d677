from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from src.core.projects.constants import (
    BENEFIT_AREA_FIELDS,
    IDENTIFIER_FIELDS,
    IS_EDIT,
    JOURNEY_STARTED,
    ORIGINAL_DATA,
    Field,
)

_PROTECTED_KEYS = frozenset({*IDENTIFIER_FIELDS, IS_EDIT, JOURNEY_STARTED, ORIGINAL_DATA})
_UNTRACKED_KEYS = _PROTECTED_KEYS | frozenset(BENEFIT_AREA_FIELDS)


@dataclass(frozen=True)
class ChangeSet:
    has_changes: bool
    changed_fields: tuple[str, ...]


def reset_draft() -> dict[str, Any]:
    return {JOURNEY_STARTED: True, IS_EDIT: False}


def initialize_edit_session(project_data: Mapping[str, Any]) -> dict[str, Any]:
    draft = deepcopy(dict(project_data))
    draft[JOURNEY_STARTED] = True
    draft[IS_EDIT] = True
    draft[ORIGINAL_DATA] = deepcopy(dict(project_data))
    return draft


def is_completed_create(draft: Optional[Mapping[str, Any]]) -> bool:
    """A create draft that already holds a reference number has been saved and is finished."""
    if not draft or draft.get(IS_EDIT) is True:
        return False
    return bool(draft.get(Field.REFERENCE_NUMBER))


def is_editing(draft: Optional[Mapping[str, Any]], slug: str) -> bool:
    return bool(draft) and draft.get(IS_EDIT) is True and draft.get(Field.SLUG) == slug


def merge_answers(draft: Mapping[str, Any], answers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge form answers into the draft; identifiers and session flags never come from a form."""
    merged = dict(draft)
    for name, value in answers.items():
        if name not in _PROTECTED_KEYS:
            merged[name] = value
    return merged


def _normalise(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, str):
        return value.strip()
    return value


def detect_changes(draft: Mapping[str, Any], fields: Iterable[str] = ()) -> ChangeSet:
    original = draft.get(ORIGINAL_DATA) or {}
    names = tuple(fields) or tuple(name for name in draft if name not in _UNTRACKED_KEYS)
    changed = tuple(
        name for name in names if _normalise(draft.get(name)) != _normalise(original.get(name))
    )
    return ChangeSet(has_changes=bool(changed), changed_fields=changed)
