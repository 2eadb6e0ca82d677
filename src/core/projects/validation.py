import re
from dataclasses import dataclass, field
from datetime import date
from typing import Annotated, Any, Callable, ClassVar, Literal, Mapping, Optional, Protocol, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    create_model,
    field_validator,
)
from pydantic_core import PydanticCustomError

from src.core.projects.constants import (
    INTERVENTION_TYPES_BY_PROJECT_TYPE,
    MAX_YEAR,
    MILESTONE_SEQUENCE,
    MIN_YEAR,
    Field as ProjectField,
    InterventionType,
    ProjectType,
    requires_intervention_types,
)
from src.core.projects.financial_year import current_fiscal_year

NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _-]+$")
TRUE_VALUES = {"true", "yes", "1", "on"}
FALSE_VALUES = {"false", "no", "0", "off"}


@dataclass(frozen=True)
class ValidationContext:
    today: date

    @property
    def current_fiscal_year(self) -> int:
        return current_fiscal_year(self.today)

    @property
    def current_month_year(self) -> tuple[int, int]:
        return (self.today.year, self.today.month)


@dataclass
class ValidationOutcome:
    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class StepValidator(Protocol):
    def validate(
        self, data: Mapping[str, Any], context: ValidationContext
    ) -> ValidationOutcome: ...


CrossFieldRule = Callable[
    [dict[str, Any], Mapping[str, Any], ValidationContext, dict[str, str]], None
]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
        return int(value.strip())
    return None


def _coded_error(code: str) -> PydanticCustomError:
    return PydanticCustomError(code, code)


def _check_name(value: Any) -> str:
    text = _blank_to_none(value)
    if text is None:
        raise _coded_error("NAME_REQUIRED")
    if not isinstance(text, str) or not NAME_PATTERN.fullmatch(text):
        raise _coded_error("NAME_INVALID_FORMAT")
    return text


def _check_area_id(value: Any) -> int:
    value = _blank_to_none(value)
    if value is None:
        raise _coded_error("AREA_ID_REQUIRED")
    parsed = _parse_int(value)
    if parsed is None or parsed < 1:
        raise _coded_error("AREA_ID_INVALID")
    return parsed


def _check_project_type(value: Any) -> str:
    value = _blank_to_none(value)
    if value is None:
        raise _coded_error("PROJECT_TYPE_REQUIRED")
    if value not in {item.value for item in ProjectType}:
        raise _coded_error("PROJECT_TYPE_INVALID")
    return value


def _year_checker(prefix: str) -> Callable[[Any], int]:
    def check(value: Any) -> int:
        value = _blank_to_none(value)
        if value is None:
            raise _coded_error(f"{prefix}_REQUIRED")
        parsed = _parse_int(value)
        if parsed is None or not MIN_YEAR <= parsed <= MAX_YEAR:
            raise _coded_error(f"{prefix}_INVALID")
        return parsed

    return check


def _check_month(value: Any) -> int:
    value = _blank_to_none(value)
    if value is None:
        raise _coded_error("MONTH_REQUIRED")
    parsed = _parse_int(value)
    if parsed is None or not 1 <= parsed <= 12:
        raise _coded_error("MONTH_INVALID")
    return parsed


def _check_year(value: Any) -> int:
    value = _blank_to_none(value)
    if value is None:
        raise _coded_error("YEAR_REQUIRED")
    parsed = _parse_int(value)
    if parsed is None or not MIN_YEAR <= parsed <= MAX_YEAR:
        raise _coded_error("YEAR_INVALID")
    return parsed


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in TRUE_VALUES:
        return True
    if isinstance(value, str) and value.strip().lower() in FALSE_VALUES:
        return False
    return None


def _check_could_start_early(value: Any) -> bool:
    value = _blank_to_none(value)
    if value is None:
        raise _coded_error("COULD_START_EARLY_REQUIRED")
    parsed = parse_bool(value)
    if parsed is None:
        raise _coded_error("COULD_START_EARLY_INVALID")
    return parsed


def _as_selection(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if item not in (None, "")]
    return [value]


class ProjectNameForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Annotated[Optional[str], BeforeValidator(_check_name)] = Field(
        default=None,
        validate_default=True,
        description="Project name; letters, digits, spaces, underscores and hyphens.",
        examples=["Thames Barrier Upgrade"],
    )


class ProjectAreaForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    area_id: Annotated[Optional[int], BeforeValidator(_check_area_id)] = Field(
        default=None,
        validate_default=True,
        description="Identifier of the owning area from reference data.",
        examples=[12],
    )


class ProjectTypeForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_type: Annotated[Optional[str], BeforeValidator(_check_project_type)] = Field(
        default=None,
        validate_default=True,
        description="Project type code.",
        examples=["DEF"],
    )


class _InterventionSelection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    allowed_intervention_types: ClassVar[tuple[str, ...]] = ()

    project_intervention_types: Annotated[list[str], BeforeValidator(_as_selection)] = Field(
        default_factory=list,
        validate_default=True,
        description="Selected intervention type codes.",
        examples=[["NFM", "SUDS"]],
    )

    @field_validator("project_intervention_types")
    @classmethod
    def _check_selection(cls, value: list[str]) -> list[str]:
        if not value:
            raise _coded_error("PROJECT_INTERVENTION_TYPE_REQUIRED")
        known = {item.value for item in InterventionType}
        if any(item not in known for item in value):
            raise _coded_error("PROJECT_INTERVENTION_TYPE_INVALID")
        if any(item not in cls.allowed_intervention_types for item in value):
            raise _coded_error("PROJECT_INTERVENTION_TYPE_NOT_ALLOWED")
        return list(dict.fromkeys(value))


class DefenceInterventionSelection(_InterventionSelection):
    allowed_intervention_types: ClassVar[tuple[str, ...]] = INTERVENTION_TYPES_BY_PROJECT_TYPE[
        ProjectType.DEF.value
    ]
    project_type: Literal["DEF"]


class RepairInterventionSelection(_InterventionSelection):
    allowed_intervention_types: ClassVar[tuple[str, ...]] = INTERVENTION_TYPES_BY_PROJECT_TYPE[
        ProjectType.REP.value
    ]
    project_type: Literal["REP"]


class RefurbishmentInterventionSelection(_InterventionSelection):
    allowed_intervention_types: ClassVar[tuple[str, ...]] = INTERVENTION_TYPES_BY_PROJECT_TYPE[
        ProjectType.REF.value
    ]
    project_type: Literal["REF"]


InterventionSelection = Annotated[
    Union[
        DefenceInterventionSelection,
        RepairInterventionSelection,
        RefurbishmentInterventionSelection,
    ],
    Field(discriminator="project_type"),
]
INTERVENTION_SELECTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(InterventionSelection)


class PrimaryInterventionForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_intervention_types: Annotated[list[str], BeforeValidator(_as_selection)] = Field(
        default_factory=list
    )
    main_intervention_type: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Primary intervention type; must be one of the selected types.",
        examples=["NFM"],
    )

    @field_validator("main_intervention_type", mode="before")
    @classmethod
    def _check_main(cls, value: Any, info: ValidationInfo) -> str:
        value = _blank_to_none(value)
        if value is None:
            raise _coded_error("PROJECT_MAIN_INTERVENTION_TYPE_REQUIRED")
        if value not in info.data.get("project_intervention_types", []):
            raise _coded_error("PROJECT_MAIN_INTERVENTION_TYPE_INVALID")
        return value


class FinancialStartYearForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    financial_start_year: Annotated[
        Optional[int], BeforeValidator(_year_checker("FINANCIAL_START_YEAR"))
    ] = Field(default=None, validate_default=True, examples=[2026])


class FinancialEndYearForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    financial_end_year: Annotated[
        Optional[int], BeforeValidator(_year_checker("FINANCIAL_END_YEAR"))
    ] = Field(default=None, validate_default=True, examples=[2030])


class CouldStartEarlyForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    could_start_early: Annotated[Optional[bool], BeforeValidator(_check_could_start_early)] = (
        Field(default=None, validate_default=True, examples=[True])
    )


def milestone_form(month_field: str, year_field: str) -> type[BaseModel]:
    return create_model(
        f"MilestoneForm_{month_field.removesuffix('_month')}",
        __config__=ConfigDict(extra="ignore"),
        **{
            month_field: (
                Annotated[Optional[int], BeforeValidator(_check_month)],
                Field(default=None, validate_default=True),
            ),
            year_field: (
                Annotated[Optional[int], BeforeValidator(_check_year)],
                Field(default=None, validate_default=True),
            ),
        },
    )


def _collect_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in exc.errors():
        location = [part for part in item["loc"] if isinstance(part, str)]
        field_name = location[-1] if location else "form"
        code = item["type"]
        if not code.isupper():
            code = f"{field_name.upper()}_INVALID"
        errors.setdefault(field_name, code)
    return errors


@dataclass(frozen=True)
class FormValidator:
    """Field-level rules from a pydantic form, followed by cross-field rules on the draft."""

    form: type[BaseModel]
    fields: tuple[str, ...]
    rules: tuple[CrossFieldRule, ...] = ()

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> ValidationOutcome:
        try:
            parsed = self.form.model_validate(dict(data))
        except ValidationError as exc:
            return ValidationOutcome(values={}, errors=_collect_errors(exc))
        values = {name: getattr(parsed, name) for name in self.fields}
        errors: dict[str, str] = {}
        for rule in self.rules:
            rule(values, data, context, errors)
        return ValidationOutcome(values={} if errors else values, errors=errors)


class InterventionTypeValidator:
    fields = (ProjectField.PROJECT_INTERVENTION_TYPES,)

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> ValidationOutcome:
        project_type = data.get(ProjectField.PROJECT_TYPE)
        if not requires_intervention_types(project_type):
            return ValidationOutcome(errors={ProjectField.PROJECT_TYPE: "PROJECT_TYPE_INVALID"})
        try:
            selection = INTERVENTION_SELECTION_ADAPTER.validate_python(
                {
                    ProjectField.PROJECT_TYPE: project_type,
                    ProjectField.PROJECT_INTERVENTION_TYPES: data.get(
                        ProjectField.PROJECT_INTERVENTION_TYPES
                    ),
                }
            )
        except ValidationError as exc:
            return ValidationOutcome(errors=_collect_errors(exc))
        return ValidationOutcome(
            values={ProjectField.PROJECT_INTERVENTION_TYPES: selection.project_intervention_types}
        )


def _financial_start_year_rules(
    values: dict[str, Any],
    data: Mapping[str, Any],
    context: ValidationContext,
    errors: dict[str, str],
) -> None:
    start = values[ProjectField.FINANCIAL_START_YEAR]
    if start < context.current_fiscal_year:
        errors[ProjectField.FINANCIAL_START_YEAR] = "FINANCIAL_START_YEAR_SHOULD_BE_IN_FUTURE"
        return
    end = _parse_int(data.get(ProjectField.FINANCIAL_END_YEAR))
    if end is not None and start > end:
        errors[ProjectField.FINANCIAL_START_YEAR] = (
            "FINANCIAL_START_YEAR_SHOULD_BE_LESS_THAN_END_YEAR"
        )


def _financial_end_year_rules(
    values: dict[str, Any],
    data: Mapping[str, Any],
    context: ValidationContext,
    errors: dict[str, str],
) -> None:
    end = values[ProjectField.FINANCIAL_END_YEAR]
    if end < context.current_fiscal_year:
        errors[ProjectField.FINANCIAL_END_YEAR] = "FINANCIAL_END_YEAR_SHOULD_BE_IN_FUTURE"
        return
    start = _parse_int(data.get(ProjectField.FINANCIAL_START_YEAR))
    if start is not None and end < start:
        errors[ProjectField.FINANCIAL_END_YEAR] = (
            "FINANCIAL_END_YEAR_SHOULD_BE_GREATER_THAN_START_YEAR"
        )


def previous_milestone(month_field: str) -> Optional[tuple[str, str]]:
    for index, (month, _year) in enumerate(MILESTONE_SEQUENCE):
        if month == month_field:
            return MILESTONE_SEQUENCE[index - 1] if index > 0 else None
    return None


def milestone_sequence_rule(month_field: str, year_field: str) -> CrossFieldRule:
    """Not before the current month, and strictly after the preceding milestone when known."""
    previous = previous_milestone(month_field)

    def rule(
        values: dict[str, Any],
        data: Mapping[str, Any],
        context: ValidationContext,
        errors: dict[str, str],
    ) -> None:
        entered = (values[year_field], values[month_field])
        if entered < context.current_month_year:
            errors[month_field] = "DATE_IN_PAST"
            return
        if previous is None:
            return
        previous_month = _parse_int(data.get(previous[0]))
        previous_year = _parse_int(data.get(previous[1]))
        if previous_month is None or previous_year is None:
            return
        if entered <= (previous_year, previous_month):
            errors[month_field] = "DATE_BEFORE_PREVIOUS_STAGE"

    return rule


def milestone_validator(month_field: str, year_field: str) -> FormValidator:
    return FormValidator(
        form=milestone_form(month_field, year_field),
        fields=(month_field, year_field),
        rules=(milestone_sequence_rule(month_field, year_field),),
    )


class EarliestStartDateValidator:
    fields = (ProjectField.EARLIEST_WITH_GIA_MONTH, ProjectField.EARLIEST_WITH_GIA_YEAR)

    def __init__(self) -> None:
        self._dates = milestone_validator(*self.fields)

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> ValidationOutcome:
        if parse_bool(data.get(ProjectField.COULD_START_EARLY)) is True:
            return self._dates.validate(data, context)
        if any(_blank_to_none(data.get(name)) is not None for name in self.fields):
            return ValidationOutcome(
                errors={ProjectField.EARLIEST_WITH_GIA_MONTH: "EARLIEST_START_DATE_NOT_ALLOWED"}
            )
        return ValidationOutcome(values={name: None for name in self.fields})


PROJECT_NAME_VALIDATOR = FormValidator(form=ProjectNameForm, fields=(ProjectField.NAME,))
PROJECT_AREA_VALIDATOR = FormValidator(form=ProjectAreaForm, fields=(ProjectField.AREA_ID,))
PROJECT_TYPE_VALIDATOR = FormValidator(form=ProjectTypeForm, fields=(ProjectField.PROJECT_TYPE,))
INTERVENTION_TYPE_VALIDATOR = InterventionTypeValidator()
PRIMARY_INTERVENTION_VALIDATOR = FormValidator(
    form=PrimaryInterventionForm, fields=(ProjectField.MAIN_INTERVENTION_TYPE,)
)
FINANCIAL_START_YEAR_VALIDATOR = FormValidator(
    form=FinancialStartYearForm,
    fields=(ProjectField.FINANCIAL_START_YEAR,),
    rules=(_financial_start_year_rules,),
)
FINANCIAL_END_YEAR_VALIDATOR = FormValidator(
    form=FinancialEndYearForm,
    fields=(ProjectField.FINANCIAL_END_YEAR,),
    rules=(_financial_end_year_rules,),
)
COULD_START_EARLY_VALIDATOR = FormValidator(
    form=CouldStartEarlyForm, fields=(ProjectField.COULD_START_EARLY,)
)
EARLIEST_START_DATE_VALIDATOR = EarliestStartDateValidator()
