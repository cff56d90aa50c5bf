"""
app/services/ledger_service.py

Purpose: Ledger persistence gateway

- Abstract interface the conversation flow depends on
- Google Sheets implementation (ingresos, gastos, parejas, usuarios)
- Month filtering for the user and their linked partner
- Partner link upsert keyed by phone

Sheets calls are blocking, so every public coroutine runs its work
in a worker thread.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import gspread
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import settings
from app.core.exceptions import GastosBotError, PersistenceError
from app.core.logging import get_logger, LogContext
from app.db.sheets import SheetsClient, check_sheets_health, get_sheets_client
from app.models.ledger import (
    ExpenseRecord,
    IncomeRecord,
    PartnerLink,
    SharingType,
    UserProfile,
)
from utils.constants import SALARY_LABEL
from utils.time_utils import (
    format_sheet_date,
    format_sheet_timestamp,
    is_same_month,
    local_now,
    parse_sheet_date,
    parse_sheet_timestamp,
)
from utils.validation_utils import phone_key

logger = get_logger(__name__)


# Column layouts (header row of each worksheet)
INCOME_COLUMNS = ["fecha", "telefono", "monto", "descripcion"]
EXPENSE_COLUMNS = ["fecha", "telefono", "monto", "descripcion", "tipo", "categoria", "porcentaje"]
PARTNER_COLUMNS = ["telefono", "nombre_pareja", "telefono_pareja", "fecha_config"]
USER_COLUMNS = ["telefono", "nombre", "sueldo", "telefono_pareja", "fecha_alta"]


class LedgerGateway(ABC):
    """
    Abstract interface for ledger storage.

    Any backend (Google Sheets, a database, an in-memory fake for tests)
    implements these coroutines. Failures are raised as PersistenceError.
    """

    @abstractmethod
    async def record_income(self, phone: str, amount: int, label: str) -> bool:
        """
        Appends an income record.

        Raises:
            PersistenceError: If the write fails
        """

    @abstractmethod
    async def record_expense(
        self,
        phone: str,
        amount: int,
        description: str,
        sharing_type: SharingType,
        percentage: Optional[int] = None,
        category: Optional[str] = None,
    ) -> bool:
        """
        Appends an expense record.

        `percentage` defaults to DEFAULT_SHARE_PERCENTAGE for shared
        expenses and 100 for individual ones.

        Raises:
            PersistenceError: If the write fails
        """

    @abstractmethod
    async def fetch_monthly_expenses(self, phone: str) -> List[ExpenseRecord]:
        """
        Expenses of the current calendar month recorded by `phone` or by
        its linked partner.
        """

    @abstractmethod
    async def fetch_monthly_incomes(self, phone: str) -> List[IncomeRecord]:
        """Incomes of the current calendar month recorded by `phone`."""

    @abstractmethod
    async def link_partner(self, phone: str, partner_name: str, partner_phone: str) -> bool:
        """
        Creates or replaces the partner link of `phone`.

        Raises:
            PersistenceError: If the write fails
        """

    @abstractmethod
    async def fetch_partner_link(self, phone: str) -> Optional[PartnerLink]:
        """Returns the partner link of `phone`, or None."""

    @abstractmethod
    async def ensure_user(self, phone: str, name: str) -> UserProfile:
        """Returns the user's profile row, creating it when missing."""

    async def health_check(self) -> bool:
        return True

    async def get_stats(self) -> Dict[str, int]:
        return {}


def resolve_percentage(sharing_type: SharingType, percentage: Optional[int]) -> int:
    if percentage is not None:
        return percentage
    if sharing_type == SharingType.SHARED:
        return settings.DEFAULT_SHARE_PERCENTAGE
    return 100


def _to_int(value: Any, default: int = 0) -> int:
    """Sheet cells come back as strings, possibly with grouping separators."""
    if value is None:
        return default
    text = str(value).replace(".", "").replace(",", "").strip()
    try:
        return int(text)
    except ValueError:
        return default


def _to_amount(value: Any) -> Optional[int]:
    """Amount cell as a non-negative int, or None when it is blank, garbled or negative."""
    amount = _to_int(value, default=-1)
    return amount if amount >= 0 else None


def _rows_as_dicts(values: List[List[str]]) -> List[Dict[str, str]]:
    """Maps every data row to {header: cell}, tolerating short rows."""
    if not values:
        return []
    header = [h.strip() for h in values[0]]
    return [
        {key: (row[idx] if idx < len(row) else "") for idx, key in enumerate(header)}
        for row in values[1:]
        if any(cell.strip() for cell in row)
    ]


def _find_row_index(values: List[List[str]], column: str, phone: str) -> Optional[int]:
    """1-based sheet row of the first row whose `column` matches `phone`."""
    if not values:
        return None
    header = [h.strip() for h in values[0]]
    if column not in header:
        return None
    col = header.index(column)
    key = phone_key(phone)
    for idx, row in enumerate(values[1:], start=2):
        if col < len(row) and phone_key(row[col]) == key:
            return idx
    return None


class GoogleSheetsLedger(LedgerGateway):
    """
    Google Sheets implementation of the ledger.

    One worksheet per record kind; rows are appended with RAW input so
    phone numbers and dates are stored as typed.
    """

    def __init__(self, client: Optional[SheetsClient] = None):
        self._client = client or get_sheets_client()

    # ------------------------------------------------------------
    # Worksheets
    # ------------------------------------------------------------

    def _incomes(self) -> gspread.Worksheet:
        return self._client.worksheet(settings.INCOMES_SHEET_NAME, INCOME_COLUMNS)

    def _expenses(self) -> gspread.Worksheet:
        return self._client.worksheet(settings.EXPENSES_SHEET_NAME, EXPENSE_COLUMNS)

    def _partners(self) -> gspread.Worksheet:
        return self._client.worksheet(settings.PARTNERS_SHEET_NAME, PARTNER_COLUMNS)

    def _users(self) -> gspread.Worksheet:
        return self._client.worksheet(settings.USERS_SHEET_NAME, USER_COLUMNS)

    async def _run(self, action: str, func, *args):
        """Runs a blocking call in a thread, normalizing failures to PersistenceError."""
        try:
            return await asyncio.to_thread(func, *args)
        except GastosBotError:
            raise
        except Exception as e:
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            self._client.invalidate()
            raise PersistenceError(f"Failed to {action}: {e}") from e

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(settings.SHEETS_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append(self, sheet: gspread.Worksheet, row: List[Any]) -> None:
        sheet.append_row(row, value_input_option="RAW")

    # ------------------------------------------------------------
    # Income
    # ------------------------------------------------------------

    def _record_income_sync(self, phone: str, amount: int, label: str) -> bool:
        now = local_now()
        self._append(self._incomes(), [format_sheet_timestamp(now), phone, amount, label])
        logger.info(f"💰 Income saved: {amount}")

        if label == SALARY_LABEL:
            self._update_user_cell(phone, "sueldo", amount)
        return True

    async def record_income(self, phone: str, amount: int, label: str) -> bool:
        with LogContext(phone=phone):
            return await self._run("save income", self._record_income_sync, phone, amount, label)

    def _incomes_for_month_sync(self, phone: str) -> List[IncomeRecord]:
        now = local_now()
        key = phone_key(phone)
        records = []
        for row in _rows_as_dicts(self._incomes().get_all_values()):
            if phone_key(row.get("telefono", "")) != key:
                continue
            timestamp = parse_sheet_timestamp(row.get("fecha", ""))
            if timestamp is None:
                logger.warning(f"Skipping income with unparseable date: {row.get('fecha')!r}")
                continue
            if not is_same_month(timestamp, now):
                continue
            amount = _to_amount(row.get("monto"))
            if amount is None:
                logger.warning(f"Skipping income with invalid amount: {row.get('monto')!r}")
                continue
            records.append(IncomeRecord(
                timestamp=timestamp,
                phone=row.get("telefono", ""),
                amount=amount,
                description=row.get("descripcion") or SALARY_LABEL,
            ))
        return records

    async def fetch_monthly_incomes(self, phone: str) -> List[IncomeRecord]:
        return await self._run("fetch incomes", self._incomes_for_month_sync, phone)

    # ------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------

    def _record_expense_sync(
        self,
        phone: str,
        amount: int,
        description: str,
        sharing_type: SharingType,
        percentage: int,
        category: Optional[str],
    ) -> bool:
        now = local_now()
        self._append(self._expenses(), [
            format_sheet_timestamp(now),
            phone,
            amount,
            description,
            sharing_type.value,
            category or "",
            percentage,
        ])
        logger.info(f"🛍️ Expense saved: {amount} ({sharing_type.value})")
        return True

    async def record_expense(
        self,
        phone: str,
        amount: int,
        description: str,
        sharing_type: SharingType,
        percentage: Optional[int] = None,
        category: Optional[str] = None,
    ) -> bool:
        with LogContext(phone=phone):
            return await self._run(
                "save expense",
                self._record_expense_sync,
                phone,
                amount,
                description,
                sharing_type,
                resolve_percentage(sharing_type, percentage),
                category,
            )

    def _row_to_expense(self, row: Dict[str, str], timestamp: datetime, amount: int) -> ExpenseRecord:
        sharing_type = SharingType.from_cell(row.get("tipo"))
        percentage_cell = row.get("porcentaje", "")
        percentage = _to_int(percentage_cell, default=-1)
        if not 0 <= percentage <= 100:
            percentage = resolve_percentage(sharing_type, None)
        return ExpenseRecord(
            timestamp=timestamp,
            phone=row.get("telefono", ""),
            amount=amount,
            description=row.get("descripcion") or "Sin descripción",
            category=row.get("categoria") or None,
            sharing_type=sharing_type,
            share_percentage=percentage,
        )

    def _expenses_for_month_sync(self, phone: str) -> List[ExpenseRecord]:
        keys = {phone_key(phone)}
        partner = self._partner_link_sync(phone)
        if partner and phone_key(partner.partner_phone):
            keys.add(phone_key(partner.partner_phone))

        now = local_now()
        records = []
        rows = _rows_as_dicts(self._expenses().get_all_values())
        for row in rows:
            if phone_key(row.get("telefono", "")) not in keys:
                continue
            timestamp = parse_sheet_timestamp(row.get("fecha", ""))
            if timestamp is None:
                logger.warning(f"Skipping expense with unparseable date: {row.get('fecha')!r}")
                continue
            if not is_same_month(timestamp, now):
                continue
            amount = _to_amount(row.get("monto"))
            if amount is None:
                logger.warning(f"Skipping expense with invalid amount: {row.get('monto')!r}")
                continue
            records.append(self._row_to_expense(row, timestamp, amount))

        logger.info(f"📊 {len(records)} expense(s) this month out of {len(rows)} row(s)")
        return records

    async def fetch_monthly_expenses(self, phone: str) -> List[ExpenseRecord]:
        with LogContext(phone=phone):
            return await self._run("fetch expenses", self._expenses_for_month_sync, phone)

    # ------------------------------------------------------------
    # Partner
    # ------------------------------------------------------------

    def _link_partner_sync(self, phone: str, partner_name: str, partner_phone: str) -> bool:
        sheet = self._partners()
        values = sheet.get_all_values()
        today = format_sheet_date(local_now())
        row_index = _find_row_index(values, "telefono", phone)

        if row_index:
            header = [h.strip() for h in values[0]]
            for column, value in (
                ("nombre_pareja", partner_name),
                ("telefono_pareja", partner_phone),
                ("fecha_config", today),
            ):
                sheet.update_cell(row_index, header.index(column) + 1, value)
            logger.info("👫 Partner link updated")
        else:
            self._append(sheet, [phone, partner_name, partner_phone, today])
            logger.info("👫 Partner link created")

        self._update_user_cell(phone, "telefono_pareja", partner_phone)
        return True

    async def link_partner(self, phone: str, partner_name: str, partner_phone: str) -> bool:
        with LogContext(phone=phone):
            return await self._run(
                "link partner", self._link_partner_sync, phone, partner_name, partner_phone
            )

    def _partner_link_sync(self, phone: str) -> Optional[PartnerLink]:
        key = phone_key(phone)
        for row in _rows_as_dicts(self._partners().get_all_values()):
            if phone_key(row.get("telefono", "")) == key:
                return PartnerLink(
                    phone=row.get("telefono", ""),
                    partner_name=row.get("nombre_pareja", ""),
                    partner_phone=row.get("telefono_pareja", ""),
                    configured_at=parse_sheet_date(row.get("fecha_config", "")),
                )
        return None

    async def fetch_partner_link(self, phone: str) -> Optional[PartnerLink]:
        return await self._run("fetch partner link", self._partner_link_sync, phone)

    # ------------------------------------------------------------
    # Users
    # ------------------------------------------------------------

    def _update_user_cell(self, phone: str, column: str, value: Any) -> None:
        """
        Refreshes one column of an existing user row. The ledger record
        written before this is what matters, so a failure is only logged.
        """
        try:
            sheet = self._users()
            values = sheet.get_all_values()
            row_index = _find_row_index(values, "telefono", phone)
            if row_index is None:
                return
            header = [h.strip() for h in values[0]]
            sheet.update_cell(row_index, header.index(column) + 1, value)
        except Exception as e:
            logger.warning(f"Could not update user column '{column}': {e}")

    def _ensure_user_sync(self, phone: str, name: str) -> UserProfile:
        sheet = self._users()
        key = phone_key(phone)
        for row in _rows_as_dicts(sheet.get_all_values()):
            if phone_key(row.get("telefono", "")) == key:
                salary = _to_int(row.get("sueldo"), default=-1)
                return UserProfile(
                    phone=row.get("telefono", ""),
                    name=row.get("nombre", ""),
                    salary=salary if salary >= 0 else None,
                    partner_phone=row.get("telefono_pareja") or None,
                    created_at=parse_sheet_date(row.get("fecha_alta", "")),
                )

        now = local_now()
        self._append(sheet, [phone, name, "", "", format_sheet_date(now)])
        logger.info("🆕 User registered")
        return UserProfile(phone=phone, name=name, created_at=now)

    async def ensure_user(self, phone: str, name: str) -> UserProfile:
        with LogContext(phone=phone):
            return await self._run("register user", self._ensure_user_sync, phone, name)

    # ------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------

    def _stats_sync(self) -> Dict[str, int]:
        def count(sheet: gspread.Worksheet) -> int:
            return len(_rows_as_dicts(sheet.get_all_values()))

        return {
            "ingresos": count(self._incomes()),
            "gastos": count(self._expenses()),
            "parejas": count(self._partners()),
            "usuarios": count(self._users()),
        }

    async def get_stats(self) -> Dict[str, int]:
        return await self._run("collect stats", self._stats_sync)

    async def health_check(self) -> bool:
        return await asyncio.to_thread(check_sheets_health, self._client)


# Global ledger instance
_ledger: Optional[LedgerGateway] = None


def get_ledger() -> LedgerGateway:
    """Returns the process-wide ledger gateway."""
    global _ledger
    if _ledger is None:
        _ledger = GoogleSheetsLedger()
    return _ledger
