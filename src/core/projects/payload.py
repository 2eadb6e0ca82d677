from typing import Any, Mapping, Union

from src.core.projects.constants import (
    INTERVENTION_FIELDS,
    SAVE_LEVEL_FIELDS,
    Field,
    SaveLevel,
    requires_intervention_types,
)
from src.core.projects.errors import ProjectConfigurationError


def resolve_save_level(level: Union[SaveLevel, str]) -> SaveLevel:
    try:
        return SaveLevel(level)
    except ValueError as exc:
        raise ProjectConfigurationError("UNKNOWN_SAVE_LEVEL") from exc


def build_payload(draft: Mapping[str, Any], level: Union[SaveLevel, str]) -> dict[str, Any]:
    """Project the draft onto the minimal field set the backend expects for `level`.

    Intervention fields are dropped before selection whenever the project type does not
    use them, so stale answers from an earlier type never reach the backend. Keys absent
    from the draft are skipped; an explicit None is sent as null.
    """
    fields = SAVE_LEVEL_FIELDS[resolve_save_level(level)]
    source = dict(draft)
    if not requires_intervention_types(source.get(Field.PROJECT_TYPE)):
        for name in INTERVENTION_FIELDS:
            source.pop(name, None)
    return {name: source[name] for name in fields if name in source}
