from enum import Enum


class ProjectType(str, Enum):
    DEF = "DEF"
    REP = "REP"
    REF = "REF"
    HCR = "HCR"
    STR = "STR"
    STU = "STU"
    ELO = "ELO"


class InterventionType(str, Enum):
    NFM = "NFM"
    PFR = "PFR"
    SUDS = "SUDS"
    OTHER = "OTHER"


class SaveLevel(str, Enum):
    INITIAL_SAVE = "INITIAL_SAVE"
    PROJECT_NAME = "PROJECT_NAME"
    PROJECT_TYPE = "PROJECT_TYPE"
    FINANCIAL_START_YEAR = "FINANCIAL_START_YEAR"
    FINANCIAL_END_YEAR = "FINANCIAL_END_YEAR"
    START_OUTLINE_BUSINESS_CASE = "START_OUTLINE_BUSINESS_CASE"
    COMPLETE_OUTLINE_BUSINESS_CASE = "COMPLETE_OUTLINE_BUSINESS_CASE"
    AWARD_MAIN_CONTRACT = "AWARD_MAIN_CONTRACT"
    START_WORK = "START_WORK"
    START_BENEFITS = "START_BENEFITS"
    COULD_START_EARLY = "COULD_START_EARLY"
    EARLIEST_START_DATE = "EARLIEST_START_DATE"


PROJECT_TYPES_REQUIRING_INTERVENTIONS = frozenset(
    {ProjectType.DEF.value, ProjectType.REP.value, ProjectType.REF.value}
)

INTERVENTION_TYPES_BY_PROJECT_TYPE: dict[str, tuple[str, ...]] = {
    ProjectType.DEF.value: tuple(item.value for item in InterventionType),
    ProjectType.REP.value: tuple(item.value for item in InterventionType),
    ProjectType.REF.value: (
        InterventionType.NFM.value,
        InterventionType.SUDS.value,
        InterventionType.OTHER.value,
    ),
}


class Field:
    REFERENCE_NUMBER = "reference_number"
    SLUG = "slug"
    NAME = "name"
    AREA_ID = "area_id"
    PROJECT_TYPE = "project_type"
    PROJECT_INTERVENTION_TYPES = "project_intervention_types"
    MAIN_INTERVENTION_TYPE = "main_intervention_type"
    FINANCIAL_START_YEAR = "financial_start_year"
    FINANCIAL_END_YEAR = "financial_end_year"
    START_OUTLINE_BUSINESS_CASE_MONTH = "start_outline_business_case_month"
    START_OUTLINE_BUSINESS_CASE_YEAR = "start_outline_business_case_year"
    COMPLETE_OUTLINE_BUSINESS_CASE_MONTH = "complete_outline_business_case_month"
    COMPLETE_OUTLINE_BUSINESS_CASE_YEAR = "complete_outline_business_case_year"
    AWARD_CONTRACT_MONTH = "award_contract_month"
    AWARD_CONTRACT_YEAR = "award_contract_year"
    START_CONSTRUCTION_MONTH = "start_construction_month"
    START_CONSTRUCTION_YEAR = "start_construction_year"
    READY_FOR_SERVICE_MONTH = "ready_for_service_month"
    READY_FOR_SERVICE_YEAR = "ready_for_service_year"
    COULD_START_EARLY = "could_start_early"
    EARLIEST_WITH_GIA_MONTH = "earliest_with_gia_month"
    EARLIEST_WITH_GIA_YEAR = "earliest_with_gia_year"
    BENEFIT_AREA_FILE_NAME = "benefit_area_file_name"
    BENEFIT_AREA_FILE_DOWNLOAD_URL = "benefit_area_file_download_url"
    BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY = "benefit_area_file_download_expiry"
    BENEFIT_AREA_UPLOAD_ID = "benefit_area_upload_id"
    BENEFIT_AREA_UPLOAD_URL = "benefit_area_upload_url"
    BENEFIT_AREA_UPLOAD_ERRORS = "benefit_area_upload_errors"


# Session bookkeeping keys; never sent to the backend.
JOURNEY_STARTED = "journey_started"
IS_EDIT = "is_edit"
ORIGINAL_DATA = "original_data"

IDENTIFIER_FIELDS = (Field.REFERENCE_NUMBER, Field.SLUG)
INTERVENTION_FIELDS = (Field.PROJECT_INTERVENTION_TYPES, Field.MAIN_INTERVENTION_TYPE)

BENEFIT_AREA_FIELDS = (
    Field.BENEFIT_AREA_FILE_NAME,
    Field.BENEFIT_AREA_FILE_DOWNLOAD_URL,
    Field.BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY,
    Field.BENEFIT_AREA_UPLOAD_ID,
    Field.BENEFIT_AREA_UPLOAD_URL,
    Field.BENEFIT_AREA_UPLOAD_ERRORS,
)

SAVE_LEVEL_FIELDS: dict[SaveLevel, tuple[str, ...]] = {
    SaveLevel.INITIAL_SAVE: (
        Field.NAME,
        Field.AREA_ID,
        Field.PROJECT_TYPE,
        Field.PROJECT_INTERVENTION_TYPES,
        Field.MAIN_INTERVENTION_TYPE,
        Field.FINANCIAL_START_YEAR,
        Field.FINANCIAL_END_YEAR,
    ),
    SaveLevel.PROJECT_NAME: (Field.REFERENCE_NUMBER, Field.NAME),
    SaveLevel.PROJECT_TYPE: (
        Field.REFERENCE_NUMBER,
        Field.PROJECT_TYPE,
        Field.PROJECT_INTERVENTION_TYPES,
        Field.MAIN_INTERVENTION_TYPE,
    ),
    SaveLevel.FINANCIAL_START_YEAR: (Field.REFERENCE_NUMBER, Field.FINANCIAL_START_YEAR),
    SaveLevel.FINANCIAL_END_YEAR: (Field.REFERENCE_NUMBER, Field.FINANCIAL_END_YEAR),
    SaveLevel.START_OUTLINE_BUSINESS_CASE: (
        Field.REFERENCE_NUMBER,
        Field.START_OUTLINE_BUSINESS_CASE_MONTH,
        Field.START_OUTLINE_BUSINESS_CASE_YEAR,
    ),
    SaveLevel.COMPLETE_OUTLINE_BUSINESS_CASE: (
        Field.REFERENCE_NUMBER,
        Field.START_OUTLINE_BUSINESS_CASE_MONTH,
        Field.START_OUTLINE_BUSINESS_CASE_YEAR,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_MONTH,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_YEAR,
    ),
    SaveLevel.AWARD_MAIN_CONTRACT: (
        Field.REFERENCE_NUMBER,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_MONTH,
        Field.COMPLETE_OUTLINE_BUSINESS_CASE_YEAR,
        Field.AWARD_CONTRACT_MONTH,
        Field.AWARD_CONTRACT_YEAR,
    ),
    SaveLevel.START_WORK: (
        Field.REFERENCE_NUMBER,
        Field.AWARD_CONTRACT_MONTH,
        Field.AWARD_CONTRACT_YEAR,
        Field.START_CONSTRUCTION_MONTH,
        Field.START_CONSTRUCTION_YEAR,
    ),
    SaveLevel.START_BENEFITS: (
        Field.REFERENCE_NUMBER,
        Field.START_CONSTRUCTION_MONTH,
        Field.START_CONSTRUCTION_YEAR,
        Field.READY_FOR_SERVICE_MONTH,
        Field.READY_FOR_SERVICE_YEAR,
    ),
    SaveLevel.COULD_START_EARLY: (Field.REFERENCE_NUMBER, Field.COULD_START_EARLY),
    SaveLevel.EARLIEST_START_DATE: (
        Field.REFERENCE_NUMBER,
        Field.COULD_START_EARLY,
        Field.EARLIEST_WITH_GIA_MONTH,
        Field.EARLIEST_WITH_GIA_YEAR,
    ),
}

# Milestones in delivery order: (month field, year field).
MILESTONE_SEQUENCE: tuple[tuple[str, str], ...] = (
    (Field.START_OUTLINE_BUSINESS_CASE_MONTH, Field.START_OUTLINE_BUSINESS_CASE_YEAR),
    (Field.COMPLETE_OUTLINE_BUSINESS_CASE_MONTH, Field.COMPLETE_OUTLINE_BUSINESS_CASE_YEAR),
    (Field.AWARD_CONTRACT_MONTH, Field.AWARD_CONTRACT_YEAR),
    (Field.START_CONSTRUCTION_MONTH, Field.START_CONSTRUCTION_YEAR),
    (Field.READY_FOR_SERVICE_MONTH, Field.READY_FOR_SERVICE_YEAR),
)

MIN_YEAR = 2000
MAX_YEAR = 2100
FINANCIAL_YEAR_OPTION_COUNT = 6

UPLOAD_ENTITY_TYPE = "project_benefit_area"

UPLOAD_SUCCESS_STATUSES = frozenset({"READY", "COMPLETE"})
UPLOAD_FAILURE_STATUSES = frozenset({"FAILED", "REJECTED"})

NETWORK_ERROR = "NETWORK_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"
UPLOAD_TIMEOUT = "UPLOAD_TIMEOUT"
UPLOAD_REJECTED = "UPLOAD_REJECTED"
UPLOAD_INITIATION_FAILED = "UPLOAD_INITIATION_FAILED"
DELETE_FAILED = "DELETE_FAILED"
PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
UPLOAD_FAILED_REASON = "Upload failed"
UPLOAD_TIMEOUT_REASON = "Upload processing timeout - please try again"


def requires_intervention_types(project_type: object) -> bool:
    return project_type in PROJECT_TYPES_REQUIRING_INTERVENTIONS
