"""
Shared fixtures

No test talks to Google: the conversation tests use an in-memory
ledger and the Sheets ledger tests use fake worksheets.
"""

from typing import Dict, List, Optional

import pytest

from app.core.exceptions import PersistenceError
from app.flow.dispatcher import ConversationService
from app.models.ledger import (
    ExpenseRecord,
    IncomeRecord,
    PartnerLink,
    UserProfile,
)
from app.services.ledger_service import LedgerGateway, resolve_percentage
from app.services.session_service import SessionStore
from utils.time_utils import local_now
from utils.validation_utils import phone_key


class FakeLedger(LedgerGateway):
    """In-memory ledger. Set `fail = True` to make every call raise PersistenceError."""

    def __init__(self):
        self.incomes: List[IncomeRecord] = []
        self.expenses: List[ExpenseRecord] = []
        self.partners: Dict[str, PartnerLink] = {}
        self.users: Dict[str, UserProfile] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise PersistenceError("sheets unavailable")

    async def record_income(self, phone, amount, label):
        self._check()
        self.incomes.append(IncomeRecord(
            timestamp=local_now(), phone=phone, amount=amount, description=label
        ))
        return True

    async def record_expense(self, phone, amount, description, sharing_type,
                             percentage=None, category=None):
        self._check()
        self.expenses.append(ExpenseRecord(
            timestamp=local_now(),
            phone=phone,
            amount=amount,
            description=description,
            category=category,
            sharing_type=sharing_type,
            share_percentage=resolve_percentage(sharing_type, percentage),
        ))
        return True

    async def fetch_monthly_expenses(self, phone):
        self._check()
        keys = {phone_key(phone)}
        link = self.partners.get(phone_key(phone))
        if link:
            keys.add(phone_key(link.partner_phone))
        return [e for e in self.expenses if phone_key(e.phone) in keys]

    async def fetch_monthly_incomes(self, phone):
        self._check()
        return [i for i in self.incomes if phone_key(i.phone) == phone_key(phone)]

    async def link_partner(self, phone, partner_name, partner_phone):
        self._check()
        self.partners[phone_key(phone)] = PartnerLink(
            phone=phone, partner_name=partner_name, partner_phone=partner_phone
        )
        return True

    async def fetch_partner_link(self, phone) -> Optional[PartnerLink]:
        self._check()
        return self.partners.get(phone_key(phone))

    async def ensure_user(self, phone, name):
        self._check()
        return self.users.setdefault(phone, UserProfile(phone=phone, name=name))

    @property
    def writes(self) -> int:
        return len(self.incomes) + len(self.expenses) + len(self.partners)


class FakeWorksheet:
    """Mimics the gspread.Worksheet calls the ledger uses. Cells are strings, as gspread returns them."""

    def __init__(self, title: str, headers: List[str]):
        self.title = title
        self.rows: List[List[str]] = [list(headers)]
        self.fail_with: Optional[Exception] = None

    def get_all_values(self):
        if self.fail_with:
            raise self.fail_with
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        if self.fail_with:
            raise self.fail_with
        self.rows.append(["" if cell is None else str(cell) for cell in row])

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = str(value)


class FakeSheetsClient:
    def __init__(self):
        self.sheets: Dict[str, FakeWorksheet] = {}
        self.invalidated = 0

    def worksheet(self, name, headers):
        if name not in self.sheets:
            self.sheets[name] = FakeWorksheet(name, headers)
        return self.sheets[name]

    def get_spreadsheet(self):
        return self

    def invalidate(self):
        self.invalidated += 1


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def service(ledger, store):
    return ConversationService(ledger=ledger, store=store)


@pytest.fixture
def sheets_client():
    return FakeSheetsClient()
