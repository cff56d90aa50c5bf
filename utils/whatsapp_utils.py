"""
utils/whatsapp_utils.py

Purpose: WhatsApp message builders

- Main menu and "append the menu" helper
- Thousands formatting for amounts
- Expense report and monthly summary texts
- TwiML reply envelope for the Twilio webhook
"""

from typing import List, Optional, Sequence

from twilio.twiml.messaging_response import MessagingResponse

from app.models.ledger import ExpenseRecord, IncomeRecord, PartnerLink
from utils.constants import (
    MAIN_MENU_MESSAGE,
    EXPENSES_REPORT_TITLE,
    MONTHLY_SUMMARY_TITLE,
    NO_EXPENSES_MESSAGE,
    SHARED_LABEL,
    INDIVIDUAL_LABEL,
    SALARY_LABEL,
)
from utils.validation_utils import phone_key

# Twilio rejects WhatsApp bodies longer than this
MAX_MESSAGE_LENGTH = 1600


def format_number(num: int) -> str:
    """
    Formats an integer with '.' as thousands separator.

    Example: 1400000 -> "1.400.000"
    """
    num = int(round(num))
    if num < 0:
        return "-" + format_number(-num)
    return f"{num:,}".replace(",", ".")


def format_amount(num: int) -> str:
    return f"${format_number(num)}"


def build_main_menu(error: Optional[str] = None) -> str:
    """
    Main menu text, optionally preceded by an error line.
    """
    if error:
        return f"{error}\n\n{MAIN_MENU_MESSAGE}"
    return MAIN_MENU_MESSAGE


def with_menu(text: str) -> str:
    """Appends the main menu so every completed flow offers the next step."""
    return f"{text}\n\n{MAIN_MENU_MESSAGE}"


def _expense_lines(expense: ExpenseRecord) -> List[str]:
    icon = "👥" if expense.is_shared else "🛍️"
    label = SHARED_LABEL if expense.is_shared else INDIVIDUAL_LABEL
    if expense.category:
        label = f"{label} · {expense.category}"
    date = expense.timestamp.strftime("%d/%m/%Y")
    return [
        f"💰 {format_amount(expense.amount)} - {expense.description}",
        f"📅 {date} | {icon} {label}",
        "",
    ]


def _split_totals(expenses: Sequence[ExpenseRecord]):
    total_shared = sum(e.amount for e in expenses if e.is_shared)
    total_individual = sum(e.amount for e in expenses if not e.is_shared)
    return total_shared, total_individual


def build_expenses_report(expenses: Sequence[ExpenseRecord]) -> str:
    """
    Lists the month's expenses with shared/individual subtotals.

    Args:
        expenses: Expense records for the current month

    Returns:
        Report text (without the main menu)
    """
    if not expenses:
        return f"{EXPENSES_REPORT_TITLE}\n\n{NO_EXPENSES_MESSAGE}"

    lines = [EXPENSES_REPORT_TITLE, ""]
    for expense in expenses:
        lines.extend(_expense_lines(expense))

    total_shared, total_individual = _split_totals(expenses)

    lines.append("📈 *RESUMEN:*")
    lines.append(f"👥 Compartidos: {format_amount(total_shared)}")
    lines.append(f"🛍️ Individuales: {format_amount(total_individual)}")
    lines.append(f"💯 Total: {format_amount(total_shared + total_individual)}")

    return "\n".join(lines)


def latest_salary(incomes: Sequence[IncomeRecord]) -> Optional[IncomeRecord]:
    """
    The salary in force: the most recent salary income of the month.

    Re-entering the salary replaces it, so the amounts are never added up.
    Ties keep the later row.
    """
    current = None
    for income in incomes:
        if income.description != SALARY_LABEL:
            continue
        if current is None or income.timestamp >= current.timestamp:
            current = income
    return current


def build_monthly_summary(
    phone: str,
    expenses: Sequence[ExpenseRecord],
    incomes: Sequence[IncomeRecord] = (),
    partner: Optional[PartnerLink] = None
) -> str:
    """
    Totals for the month plus what each party owes for shared expenses.

    Each shared expense contributes amount * share_percentage / 100 to
    every party's share (50% unless stored otherwise). When the user
    recorded a salary this month, the balance left after their own
    individual expenses and their share is shown too.

    Args:
        phone: The user asking for the summary
        expenses: Expense records for the month (user and partner)
        incomes: Income records for the month (user only)
        partner: Linked partner, if any

    Returns:
        Summary text (without the main menu)
    """
    if not expenses:
        return f"{MONTHLY_SUMMARY_TITLE}\n\n{NO_EXPENSES_MESSAGE}"

    own_key = phone_key(phone)
    total_shared, total_individual = _split_totals(expenses)
    share_each = sum(e.owed_share for e in expenses if e.is_shared)

    lines = [MONTHLY_SUMMARY_TITLE, ""]
    if partner:
        lines.append(f"👫 Pareja: {partner.partner_name}")
        lines.append("")

    lines.append(f"👥 Compartidos: {format_amount(total_shared)}")
    lines.append(f"   ↳ A cada uno le corresponde: {format_amount(share_each)}")
    lines.append(f"🛍️ Individuales: {format_amount(total_individual)}")
    lines.append(f"💯 Total: {format_amount(total_shared + total_individual)}")

    salary_income = latest_salary(incomes)
    if salary_income:
        salary = salary_income.amount
        own_individual = sum(
            e.amount for e in expenses
            if not e.is_shared and phone_key(e.phone) == own_key
        )
        balance = salary - own_individual - share_each
        lines.append("")
        lines.append(f"💰 Sueldo del mes: {format_amount(salary)}")
        lines.append(f"💵 Disponible: {format_amount(balance)}")

    return "\n".join(lines)


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Splits a long reply on line boundaries so each part fits one WhatsApp message.
    """
    if len(text) <= limit:
        return [text]

    parts = []
    current = ""
    for line in text.split("\n"):
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            parts.append(current)
        # A single line longer than the limit is hard-cut
        while len(line) > limit:
            parts.append(line[:limit])
            line = line[limit:]
        current = line
    if current:
        parts.append(current)
    return parts


def create_twiml_response(message: str) -> str:
    """
    Wraps a reply in a TwiML envelope.

    Long replies become several <Message> elements.
    """
    response = MessagingResponse()
    for part in split_message(message):
        if part:
            response.message(part)
    return str(response)
