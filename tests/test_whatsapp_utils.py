from datetime import datetime

import pytest

from app.models.ledger import ExpenseRecord, IncomeRecord, PartnerLink, SharingType
from utils.constants import MAIN_MENU_MESSAGE, NO_EXPENSES_MESSAGE
from utils.whatsapp_utils import (
    MAX_MESSAGE_LENGTH,
    build_expenses_report,
    build_main_menu,
    build_monthly_summary,
    create_twiml_response,
    format_amount,
    format_number,
    latest_salary,
    split_message,
    with_menu,
)

PHONE = "+5491100000001"
PARTNER_PHONE = "+5491100000002"
NOW = datetime(2026, 10, 19, 12, 30)


def expense(amount, sharing_type=SharingType.INDIVIDUAL, phone=PHONE, **kwargs):
    kwargs.setdefault("share_percentage", 50 if sharing_type == SharingType.SHARED else 100)
    return ExpenseRecord(
        timestamp=NOW,
        phone=phone,
        amount=amount,
        sharing_type=sharing_type,
        **kwargs,
    )


@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (999, "999"),
    (1000, "1.000"),
    (1400000, "1.400.000"),
    (-25000, "-25.000"),
    (2500.4, "2.500"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_amount():
    assert format_amount(50000) == "$50.000"


def test_main_menu():
    assert build_main_menu() == MAIN_MENU_MESSAGE
    assert build_main_menu("❌ Error") == f"❌ Error\n\n{MAIN_MENU_MESSAGE}"
    assert with_menu("Listo").endswith(MAIN_MENU_MESSAGE)


def test_empty_report():
    report = build_expenses_report([])

    assert NO_EXPENSES_MESSAGE in report
    assert "Total" not in report


def test_report_lists_expenses_and_totals():
    report = build_expenses_report([
        expense(100000, SharingType.SHARED, description="Alquiler"),
        expense(15000, description="Almuerzo", category="comida"),
    ])

    assert "💰 $100.000 - Alquiler" in report
    assert "📅 19/10/2026 | 👥 compartido" in report
    assert "individual · comida" in report
    assert "Compartidos: $100.000" in report
    assert "Individuales: $15.000" in report
    assert "Total: $115.000" in report


def test_summary_share_of_shared_expense():
    summary = build_monthly_summary(PHONE, [expense(100000, SharingType.SHARED)])

    assert "A cada uno le corresponde: $50.000" in summary
    assert "Disponible" not in summary


def test_summary_uses_stored_percentage():
    summary = build_monthly_summary(
        PHONE, [expense(100000, SharingType.SHARED, share_percentage=30)]
    )

    assert "A cada uno le corresponde: $30.000" in summary


def test_summary_balance_only_counts_own_individual_expenses():
    summary = build_monthly_summary(
        PHONE,
        [
            expense(100000, SharingType.SHARED, phone=PARTNER_PHONE),
            expense(20000),
            expense(40000, phone=PARTNER_PHONE),
        ],
        incomes=[IncomeRecord(timestamp=NOW, phone=PHONE, amount=500000, description="Sueldo")],
        partner=PartnerLink(phone=PHONE, partner_name="Ana", partner_phone=PARTNER_PHONE),
    )

    assert "Pareja: Ana" in summary
    assert "Individuales: $60.000" in summary
    assert "Sueldo del mes: $500.000" in summary
    assert "Disponible: $430.000" in summary


def test_summary_uses_latest_salary_not_the_sum():
    incomes = [
        IncomeRecord(timestamp=NOW.replace(hour=9), phone=PHONE, amount=14000000, description="Sueldo"),
        IncomeRecord(timestamp=NOW, phone=PHONE, amount=1400000, description="Sueldo"),
    ]

    summary = build_monthly_summary(PHONE, [expense(100000)], incomes=incomes)

    assert "Sueldo del mes: $1.400.000" in summary
    assert "Disponible: $1.300.000" in summary


def test_latest_salary_prefers_later_row_on_ties():
    first = IncomeRecord(timestamp=NOW, phone=PHONE, amount=1000, description="Sueldo")
    second = IncomeRecord(timestamp=NOW, phone=PHONE, amount=2000, description="Sueldo")
    bonus = IncomeRecord(timestamp=NOW.replace(hour=23), phone=PHONE, amount=9000, description="Bono")

    assert latest_salary([first, second, bonus]) is second
    assert latest_salary([bonus]) is None


def test_empty_summary():
    assert NO_EXPENSES_MESSAGE in build_monthly_summary(PHONE, [])


def test_split_message_keeps_short_text():
    assert split_message("hola") == ["hola"]


def test_split_message_on_line_boundaries():
    line = "x" * 100
    text = "\n".join([line] * 40)

    parts = split_message(text)

    assert len(parts) > 1
    assert all(len(part) <= MAX_MESSAGE_LENGTH for part in parts)
    assert "\n".join(parts) == text


def test_split_message_cuts_oversized_line():
    parts = split_message("y" * (MAX_MESSAGE_LENGTH * 2 + 5))

    assert [len(p) for p in parts] == [MAX_MESSAGE_LENGTH, MAX_MESSAGE_LENGTH, 5]


def test_twiml_escapes_reply():
    twiml = create_twiml_response("Pan & Leche <2>")

    assert twiml.startswith('<?xml version="1.0" encoding="UTF-8"?><Response>')
    assert "<Message>Pan &amp; Leche &lt;2&gt;</Message>" in twiml


def test_twiml_splits_long_reply():
    twiml = create_twiml_response("\n".join(["z" * 1000] * 3))

    assert twiml.count("<Message>") == 3
