"""Demonstration sheets: mortgage amortization and compound growth.

Each builder has a plain-Python counterpart computing the same numbers, used
to cross-check the reactive sheet.
"""

from __future__ import annotations

from flexgrid._builder import SpreadsheetBuilder
from flexgrid._model import ReactiveModel

# Row of the first amortization entry (the opening balance row).
MORTGAGE_SCHEDULE_ROW = 13


def mortgage_calculator(max_months: int = 360) -> ReactiveModel:
    """Loan inputs, payment summary and a closed-form amortization table.

    Rows past ``termYears*12`` evaluate to BLANK and render empty.
    """
    b = SpreadsheetBuilder()

    b.label("Mortgage Payment Calculator").skip(1).new_row().new_row()

    b.label("Loan Amount ($)").input("loan", 300000.0, format="N0").new_row()
    b.label("Annual Interest Rate (%)").input("annualRate", 6.5, format="N2").new_row()
    b.label("Loan Term (Years)").input("termYears", 30.0, format="N0").new_row()
    b.new_row()

    b.label("Monthly Interest Rate").formula("=(annualRate/100)/12", format="P4").new_row()
    b.label("Number of Payments").formula("=termYears*12", format="N0").new_row()
    b.new_row()

    # PMT is an outflow (negative), so it is negated for display.
    b.label("Monthly Payment")
    b.formula("=-PMT((annualRate/100)/12, termYears*12, loan)", format="C2").new_row()
    b.label("Total Payment")
    b.formula("=-PMT((annualRate/100)/12, termYears*12, loan)*termYears*12", format="C2").new_row()
    b.label("Total Interest")
    b.formula(
        "=-PMT((annualRate/100)/12, termYears*12, loan)*termYears*12-loan", format="C2",
    ).new_row()

    for heading in ("Month", "Payment", "Interest", "Principal", "Balance"):
        b.label(heading)
    b.new_row()

    for _ in range(4):
        b.label("-")
    b.formula("=loan", format="C2").new_row()

    # Chained / and - associate to the right, so the rate is grouped explicitly.
    r = "(annualRate/100)/12"
    payment = f"-PMT({r}, termYears*12, loan)"
    for month in range(1, max_months + 1):
        growth = f"(1+{r})^{month}"
        balance = f"loan*{growth}-({payment})*({growth}-1)/({r})"
        if month == 1:
            prev_balance = "loan"
        else:
            prev_growth = f"(1+{r})^{month - 1}"
            prev_balance = f"loan*{prev_growth}-({payment})*({prev_growth}-1)/({r})"
        interest = f"({prev_balance})*({r})"
        principal = f"({payment})-({interest})"
        shown = f"{month}<=termYears*12"

        b.formula(f"=IF({shown},{month},BLANK())", format="N0")
        b.formula(f"=IF({shown},{payment},BLANK())", format="C2")
        b.formula(f"=IF({shown},{interest},BLANK())", format="C2")
        b.formula(f"=IF({shown},{principal},BLANK())", format="C2")
        b.formula(f"=IF({shown},MAX(0,{balance}),BLANK())", format="C2")
        b.new_row()

    return b.title("Mortgage Payment Calculator").show_headers(True).build()


def compound_interest(max_years: int = 10) -> ReactiveModel:
    """Principal growing at a yearly rate, with a year-by-year breakdown."""
    b = SpreadsheetBuilder()

    b.label("Loan Return Calculator").skip(2).new_row().new_row()

    b.label("Principal ($)").input("principal", 10000.0, format="N0").new_row()
    b.label("Annual Rate (%)").input("rate", 7.0, format="N2").new_row()
    b.label("Years").input("years", 10.0, format="N0").new_row()
    b.new_row()

    b.label("Total Return").formula("=principal*(1+rate/100)^years", format="C2").new_row()
    b.new_row()

    b.label("Year").label("Value").label("Interest Earned").new_row()

    for year in range(1, max_years + 1):
        shown = f"{year}<=years"
        value = f"principal*(1+rate/100)^{year}"
        previous = "principal" if year == 1 else f"principal*(1+rate/100)^{year - 1}"
        b.formula(f"=IF({shown},{year},BLANK())", format="N0")
        b.formula(f"=IF({shown},{value},BLANK())", format="C2")
        b.formula(f"=IF({shown},{value}-{previous},BLANK())", format="C2")
        b.new_row()

    return b.title("Loan Return Calculator").build()


# ---------------------------------------------------------------------------
# Plain-Python equivalents
# ---------------------------------------------------------------------------


def monthly_payment(loan: float, annual_rate: float, term_years: float) -> float:
    monthly_rate = annual_rate / 100.0 / 12.0
    n = term_years * 12.0
    if monthly_rate == 0.0:
        return loan / n
    growth = (1.0 + monthly_rate) ** n
    return loan * monthly_rate * growth / (growth - 1.0)


def amortization_schedule(
    loan: float, annual_rate: float, term_years: int,
) -> list[dict[str, float]]:
    """Month-by-month payment split, stopping when the balance is paid off."""
    payment = monthly_payment(loan, annual_rate, term_years)
    monthly_rate = annual_rate / 100.0 / 12.0
    rows: list[dict[str, float]] = []
    balance = loan
    for month in range(1, term_years * 12 + 1):
        if balance <= 0.0:
            break
        interest = balance * monthly_rate
        principal = payment - interest
        balance = max(0.0, balance - principal)
        rows.append({
            "month": float(month),
            "payment": payment,
            "interest": interest,
            "principal": principal,
            "balance": balance,
        })
    return rows


def future_value(principal: float, rate: float, years: int) -> float:
    return principal * (1.0 + rate / 100.0) ** years
