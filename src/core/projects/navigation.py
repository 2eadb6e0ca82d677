from typing import Any, Mapping, Optional

from src.core.projects.errors import ProjectConfigurationError
from src.core.projects.steps import OVERVIEW, StepTransition, get_step


def resolve_transition(step: str, answers: Mapping[str, Any], is_edit: bool) -> StepTransition:
    """Return the first transition of `step` whose guard holds for the current answers."""
    descriptor = get_step(step)
    for transition in descriptor.transitions:
        if transition.guard(answers, is_edit):
            return transition
    raise ProjectConfigurationError("NO_TRANSITION_FOR_STEP")


def resolve_back_link(step: str, answers: Mapping[str, Any], is_edit: bool) -> Optional[str]:
    back_link = get_step(step).back_link
    if is_edit:
        if back_link.conditional_redirect:
            return OVERVIEW
        return back_link.edit_target or back_link.target
    if back_link.dynamic is not None:
        return back_link.dynamic(answers)
    return back_link.target


def step_path(target: str, slug: Optional[str] = None, is_edit: bool = False) -> str:
    if target == OVERVIEW:
        if not slug:
            raise ProjectConfigurationError("OVERVIEW_REQUIRES_SLUG")
        return f"/project/{slug}/overview"
    if is_edit and slug:
        return f"/project/{slug}/edit/{target}"
    return f"/project/{target}"
