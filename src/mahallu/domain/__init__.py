"""Domain layer for the Mahallu bank ledger."""

from mahallu.domain.hierarchy import HierarchyService
from mahallu.domain.ledger import LedgerService
from mahallu.domain.bank import BankTransactionService
from mahallu.domain.csv_import import CSVImportService
from mahallu.domain.reports import ReportService
from mahallu.domain.view import LedgerView

__all__ = [
    "HierarchyService",
    "LedgerService",
    "BankTransactionService",
    "CSVImportService",
    "ReportService",
    "LedgerView",
]
