"""Public interface for the ``takeout_wrapped`` package.

Re-exports the ingestion pipeline (archive -> parsers -> snapshot -> year
view), the classifier and the state store. No runtime logic lives here.
"""

from .archive import extract_archive, extract_archive_file
from .categories import (
    Category,
    CategoryShare,
    categorize,
    category_breakdown,
    load_taxonomy,
)
from .config import ALL_YEARS, Settings
from .csv_parser import parse_cashback_rewards_csv, parse_csv, parse_transactions_csv
from .currency import (
    USD_TO_INR_RATE,
    display_currency,
    format_currency,
    parse_currency,
    sum_in_primary,
    to_primary,
)
from .errors import (
    ArchiveUnreadableError,
    NoRecognizedDataError,
    StructuralParseError,
    TakeoutWrappedError,
)
from .json_parser import (
    parse_group_expenses_json,
    parse_json,
    parse_voucher_rewards_json,
    strip_anti_hijacking_prefix,
)
from .models import (
    Activity,
    ActivityType,
    CashbackReward,
    Channel,
    Currency,
    ExpenseState,
    GroupExpense,
    GroupExpenseItem,
    ItemState,
    Money,
    Transaction,
    Voucher,
)
from .snapshot import ParsedData, assemble_parsed_data, filter_by_year
from .store import DataStore, State

__all__ = [
    # Pipeline
    "extract_archive",
    "extract_archive_file",
    "parse_csv",
    "parse_transactions_csv",
    "parse_cashback_rewards_csv",
    "parse_json",
    "parse_group_expenses_json",
    "parse_voucher_rewards_json",
    "strip_anti_hijacking_prefix",
    "assemble_parsed_data",
    "filter_by_year",
    "ParsedData",
    # Currency
    "USD_TO_INR_RATE",
    "parse_currency",
    "format_currency",
    "display_currency",
    "to_primary",
    "sum_in_primary",
    # Categories
    "Category",
    "CategoryShare",
    "categorize",
    "category_breakdown",
    "load_taxonomy",
    # State
    "DataStore",
    "State",
    "Settings",
    "ALL_YEARS",
    # Models
    "Activity",
    "ActivityType",
    "CashbackReward",
    "Channel",
    "Currency",
    "ExpenseState",
    "GroupExpense",
    "GroupExpenseItem",
    "ItemState",
    "Money",
    "Transaction",
    "Voucher",
    # Errors
    "TakeoutWrappedError",
    "ArchiveUnreadableError",
    "NoRecognizedDataError",
    "StructuralParseError",
]
