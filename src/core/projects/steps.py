from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, MutableMapping, Optional

from src.core.projects.constants import (
    Field,
    SaveLevel,
    requires_intervention_types,
)
from src.core.projects.errors import ProjectConfigurationError
from src.core.projects.validation import (
    COULD_START_EARLY_VALIDATOR,
    EARLIEST_START_DATE_VALIDATOR,
    FINANCIAL_END_YEAR_VALIDATOR,
    FINANCIAL_START_YEAR_VALIDATOR,
    INTERVENTION_TYPE_VALIDATOR,
    PRIMARY_INTERVENTION_VALIDATOR,
    PROJECT_AREA_VALIDATOR,
    PROJECT_NAME_VALIDATOR,
    PROJECT_TYPE_VALIDATOR,
    StepValidator,
    milestone_validator,
    parse_bool,
)


class Step:
    NAME = "name"
    AREA = "area"
    TYPE = "type"
    INTERVENTION_TYPE = "intervention-type"
    PRIMARY_INTERVENTION_TYPE = "primary-intervention-type"
    FINANCIAL_START_YEAR = "financial-start-year"
    FINANCIAL_START_YEAR_MANUAL = "financial-start-year-manual"
    FINANCIAL_END_YEAR = "financial-end-year"
    FINANCIAL_END_YEAR_MANUAL = "financial-end-year-manual"
    START_OUTLINE_BUSINESS_CASE = "start-outline-business-case"
    COMPLETE_OUTLINE_BUSINESS_CASE = "complete-outline-business-case"
    AWARD_MAIN_CONTRACT = "award-main-contract"
    START_WORK = "start-work"
    START_BENEFITS = "start-benefits"
    COULD_START_EARLY = "could-start-early"
    EARLIEST_START_DATE = "earliest-start-date"


OVERVIEW = "overview"
CREATE = "create"
EDIT = "edit"

Guard = Callable[[Mapping[str, Any], bool], bool]
Prepare = Callable[[MutableMapping[str, Any]], None]


def always(_answers: Mapping[str, Any], _is_edit: bool) -> bool:
    return True


def creating(_answers: Mapping[str, Any], is_edit: bool) -> bool:
    return not is_edit


def editing(_answers: Mapping[str, Any], is_edit: bool) -> bool:
    return is_edit


def _both(*guards: Guard) -> Guard:
    def guard(answers: Mapping[str, Any], is_edit: bool) -> bool:
        return all(check(answers, is_edit) for check in guards)

    return guard


def interventions_not_required(answers: Mapping[str, Any], _is_edit: bool) -> bool:
    return not requires_intervention_types(answers.get(Field.PROJECT_TYPE))


def single_intervention_selected(answers: Mapping[str, Any], _is_edit: bool) -> bool:
    return len(answers.get(Field.PROJECT_INTERVENTION_TYPES) or []) == 1


def could_start_early(answers: Mapping[str, Any], _is_edit: bool) -> bool:
    return parse_bool(answers.get(Field.COULD_START_EARLY)) is True


@dataclass(frozen=True)
class StepTransition:
    target: str
    guard: Guard = always
    save_level: Optional[SaveLevel] = None


@dataclass(frozen=True)
class BackLink:
    target: Optional[str]
    edit_target: Optional[str] = None
    conditional_redirect: bool = False
    dynamic: Optional[Callable[[Mapping[str, Any]], str]] = None


@dataclass(frozen=True)
class StepDescriptor:
    step: str
    fields: tuple[str, ...]
    validator: StepValidator
    transitions: tuple[StepTransition, ...]
    back_link: BackLink
    view: str
    modes: frozenset[str] = frozenset({CREATE, EDIT})
    list_fields: tuple[str, ...] = ()
    prepare: Optional[Prepare] = None
    save_levels: tuple[SaveLevel, ...] = field(init=False)

    def __post_init__(self) -> None:
        levels = tuple(
            dict.fromkeys(t.save_level for t in self.transitions if t.save_level is not None)
        )
        object.__setattr__(self, "save_levels", levels)

    def available_in(self, is_edit: bool) -> bool:
        return (EDIT if is_edit else CREATE) in self.modes


def prepare_project_type(answers: MutableMapping[str, Any]) -> None:
    if not requires_intervention_types(answers.get(Field.PROJECT_TYPE)):
        answers[Field.PROJECT_INTERVENTION_TYPES] = []
        answers[Field.MAIN_INTERVENTION_TYPE] = None


def prepare_intervention_types(answers: MutableMapping[str, Any]) -> None:
    selected = answers.get(Field.PROJECT_INTERVENTION_TYPES)
    if selected is None or selected == "":
        selected = []
    elif not isinstance(selected, list):
        selected = list(selected) if isinstance(selected, tuple) else [selected]
    answers[Field.PROJECT_INTERVENTION_TYPES] = selected
    if len(selected) == 1:
        answers[Field.MAIN_INTERVENTION_TYPE] = selected[0]
    elif answers.get(Field.MAIN_INTERVENTION_TYPE) not in selected:
        answers[Field.MAIN_INTERVENTION_TYPE] = None


def financial_start_year_back_link(answers: Mapping[str, Any]) -> str:
    if interventions_not_required(answers, False):
        return Step.TYPE
    if single_intervention_selected(answers, False):
        return Step.INTERVENTION_TYPE
    return Step.PRIMARY_INTERVENTION_TYPE


_TO_FINANCIAL_START_YEAR = StepTransition(Step.FINANCIAL_START_YEAR, creating)
_PROJECT_TYPE_SUBMIT = StepTransition(OVERVIEW, editing, SaveLevel.PROJECT_TYPE)

_FINANCIAL_START_YEAR_TRANSITIONS = (
    StepTransition(Step.FINANCIAL_END_YEAR, creating),
    StepTransition(OVERVIEW, editing, SaveLevel.FINANCIAL_START_YEAR),
)
_FINANCIAL_END_YEAR_TRANSITIONS = (
    StepTransition(OVERVIEW, creating, SaveLevel.INITIAL_SAVE),
    StepTransition(OVERVIEW, editing, SaveLevel.FINANCIAL_END_YEAR),
)
_FINANCIAL_START_YEAR_BACK = BackLink(
    target=Step.TYPE, conditional_redirect=True, dynamic=financial_start_year_back_link
)
_EDIT_ONLY = frozenset({EDIT})


def _milestone_step(
    step: str, month_field: str, year_field: str, level: SaveLevel, next_step: str, previous: str
) -> StepDescriptor:
    return StepDescriptor(
        step=step,
        fields=(month_field, year_field),
        validator=milestone_validator(month_field, year_field),
        transitions=(StepTransition(next_step, always, level),),
        back_link=BackLink(target=previous, conditional_redirect=True),
        view="important-date",
        modes=_EDIT_ONLY,
    )


_STEPS: tuple[StepDescriptor, ...] = (
    StepDescriptor(
        step=Step.NAME,
        fields=(Field.NAME,),
        validator=PROJECT_NAME_VALIDATOR,
        transitions=(
            StepTransition(Step.AREA, creating),
            StepTransition(OVERVIEW, editing, SaveLevel.PROJECT_NAME),
        ),
        back_link=BackLink(target=None, conditional_redirect=True),
        view="name",
    ),
    StepDescriptor(
        step=Step.AREA,
        fields=(Field.AREA_ID,),
        validator=PROJECT_AREA_VALIDATOR,
        transitions=(StepTransition(Step.TYPE),),
        back_link=BackLink(target=Step.NAME),
        view="area",
        modes=frozenset({CREATE}),
    ),
    StepDescriptor(
        step=Step.TYPE,
        fields=(Field.PROJECT_TYPE,),
        validator=PROJECT_TYPE_VALIDATOR,
        transitions=(
            StepTransition(
                Step.FINANCIAL_START_YEAR, _both(interventions_not_required, creating)
            ),
            StepTransition(
                OVERVIEW, _both(interventions_not_required, editing), SaveLevel.PROJECT_TYPE
            ),
            StepTransition(Step.INTERVENTION_TYPE),
        ),
        back_link=BackLink(target=Step.AREA, conditional_redirect=True),
        view="type",
        prepare=prepare_project_type,
    ),
    StepDescriptor(
        step=Step.INTERVENTION_TYPE,
        fields=(Field.PROJECT_INTERVENTION_TYPES,),
        validator=INTERVENTION_TYPE_VALIDATOR,
        transitions=(
            StepTransition(
                Step.FINANCIAL_START_YEAR, _both(single_intervention_selected, creating)
            ),
            StepTransition(
                OVERVIEW, _both(single_intervention_selected, editing), SaveLevel.PROJECT_TYPE
            ),
            StepTransition(Step.PRIMARY_INTERVENTION_TYPE),
        ),
        back_link=BackLink(target=Step.TYPE),
        view="intervention-type",
        list_fields=(Field.PROJECT_INTERVENTION_TYPES,),
        prepare=prepare_intervention_types,
    ),
    StepDescriptor(
        step=Step.PRIMARY_INTERVENTION_TYPE,
        fields=(Field.MAIN_INTERVENTION_TYPE,),
        validator=PRIMARY_INTERVENTION_VALIDATOR,
        transitions=(_TO_FINANCIAL_START_YEAR, _PROJECT_TYPE_SUBMIT),
        back_link=BackLink(target=Step.INTERVENTION_TYPE),
        view="primary-intervention-type",
    ),
    StepDescriptor(
        step=Step.FINANCIAL_START_YEAR,
        fields=(Field.FINANCIAL_START_YEAR,),
        validator=FINANCIAL_START_YEAR_VALIDATOR,
        transitions=_FINANCIAL_START_YEAR_TRANSITIONS,
        back_link=_FINANCIAL_START_YEAR_BACK,
        view="financial-year",
    ),
    StepDescriptor(
        step=Step.FINANCIAL_START_YEAR_MANUAL,
        fields=(Field.FINANCIAL_START_YEAR,),
        validator=FINANCIAL_START_YEAR_VALIDATOR,
        transitions=_FINANCIAL_START_YEAR_TRANSITIONS,
        back_link=_FINANCIAL_START_YEAR_BACK,
        view="financial-year-manual",
    ),
    StepDescriptor(
        step=Step.FINANCIAL_END_YEAR,
        fields=(Field.FINANCIAL_END_YEAR,),
        validator=FINANCIAL_END_YEAR_VALIDATOR,
        transitions=_FINANCIAL_END_YEAR_TRANSITIONS,
        back_link=BackLink(target=Step.FINANCIAL_START_YEAR, conditional_redirect=True),
        view="financial-year",
    ),
    StepDescriptor(
        step=Step.FINANCIAL_END_YEAR_MANUAL,
        fields=(Field.FINANCIAL_END_YEAR,),
        validator=FINANCIAL_END_YEAR_VALIDATOR,
        transitions=_FINANCIAL_END_YEAR_TRANSITIONS,
        back_link=BackLink(target=Step.FINANCIAL_END_YEAR, conditional_redirect=True),
        view="financial-year-manual",
    ),
    _milestone_step(
        Step.START_OUTLINE_BUSINESS_CASE,
        Field.START_OUTLINE_BUSINESS_CASE_MONTH,
        Field.START_OUTLINE_BUSINESS_CASE_YEAR,
        SaveLevel.START_OUTLINE_BUSINESS_CASE,
        Step.COMPLETE_OUTLINE_BUSINESS_CASE,
        OVERVIEW,
    ),
    _milestone_step(
        Step.COMPLETE_OUTLINE_BUSINESS_CASE,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_MONTH,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_YEAR,
        SaveLevel.COMPLETE_OUTLINE_BUSINESS_CASE,
        Step.AWARD_MAIN_CONTRACT,
        Step.START_OUTLINE_BUSINESS_CASE,
    ),
    _milestone_step(
        Step.AWARD_MAIN_CONTRACT,
        Field.AWARD_CONTRACT_MONTH,
        Field.AWARD_CONTRACT_YEAR,
        SaveLevel.AWARD_MAIN_CONTRACT,
        Step.START_WORK,
        Step.COMPLETE_OUTLINE_BUSINESS_CASE,
    ),
    _milestone_step(
        Step.START_WORK,
        Field.START_CONSTRUCTION_MONTH,
        Field.START_CONSTRUCTION_YEAR,
        SaveLevel.START_WORK,
        Step.START_BENEFITS,
        Step.AWARD_MAIN_CONTRACT,
    ),
    _milestone_step(
        Step.START_BENEFITS,
        Field.READY_FOR_SERVICE_MONTH,
        Field.READY_FOR_SERVICE_YEAR,
        SaveLevel.START_BENEFITS,
        Step.COULD_START_EARLY,
        Step.START_WORK,
    ),
    StepDescriptor(
        step=Step.COULD_START_EARLY,
        fields=(Field.COULD_START_EARLY,),
        validator=COULD_START_EARLY_VALIDATOR,
        transitions=(
            StepTransition(
                Step.EARLIEST_START_DATE, could_start_early, SaveLevel.COULD_START_EARLY
            ),
            StepTransition(OVERVIEW, always, SaveLevel.COULD_START_EARLY),
        ),
        back_link=BackLink(target=Step.START_BENEFITS, conditional_redirect=True),
        view="could-start-early",
        modes=_EDIT_ONLY,
    ),
    StepDescriptor(
        step=Step.EARLIEST_START_DATE,
        fields=(Field.EARLIEST_WITH_GIA_MONTH, Field.EARLIEST_WITH_GIA_YEAR),
        validator=EARLIEST_START_DATE_VALIDATOR,
        transitions=(StepTransition(OVERVIEW, always, SaveLevel.EARLIEST_START_DATE),),
        back_link=BackLink(target=Step.COULD_START_EARLY, edit_target=Step.COULD_START_EARLY),
        view="important-date",
        modes=_EDIT_ONLY,
    ),
)

STEP_REGISTRY: dict[str, StepDescriptor] = {descriptor.step: descriptor for descriptor in _STEPS}


def get_step(step: str) -> StepDescriptor:
    try:
        return STEP_REGISTRY[step]
    except KeyError as exc:
        raise ProjectConfigurationError("UNKNOWN_PROJECT_STEP") from exc
