# Automatically load all models so metadata knows them
from bon_backend.models.employee_model import Employee
from bon_backend.models.bon_model import Bon
from bon_backend.models.bon_installment_model import BonInstallment
from bon_backend.models.bon_ledger_model import BonLedgerEntry
from bon_backend.models.system_settings_model import SystemSetting
