from bon_backend.schemas.employee_schema import EmployeeCreate, EmployeeOut, EmployeeMiniOut
from bon_backend.schemas.settings_schema import SettingCreate, SettingPatch
from bon_backend.schemas.bon_schema import (
    BonCreate,
    BonOut,
    BonResult,
    BonListOut,
    BonStatsOut,
    BonUpdateRequest,
    DecisionRequest,
    FieldUpdateRequest,
    EligibilityOut,
    InstallmentOut,
    InstallmentStatusUpdate,
    LedgerRowOut,
    ProcessPeriodOut,
    ProcessPeriodRequest,
)
