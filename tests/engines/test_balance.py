"""
Tests for safe-balance computation (cashbook_engines/balance.py).

Covers:
- Worked scenarios (sale + expense, then banking)
- Strictly-before semantics at the as_of boundary
- Retroactive corrections reflected on the next scan
- Window totals and net flow
"""

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from cashbook_engines import BalanceCalculator
from tests.factories import banking, expense, payment, sale, snapshot

KAMPALA = ZoneInfo("Africa/Kampala")


def _scenario_a():
    return snapshot(
        sales=[sale("2024-01-10", payments=(payment("2024-01-10", 100000),))],
        expenses=[expense("2024-01-10", 30000)],
    )


class TestBalanceAsOf:
    """Tests for BalanceCalculator.balance_as_of."""

    def test_sale_minus_expense(self, normalizer, calculator):
        ledger = normalizer.normalize(snapshot=_scenario_a())

        balance = calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 1, 11))

        assert balance == Decimal("70000")

    def test_banking_removes_cash(self, normalizer, calculator):
        snap = _scenario_a()
        snap = snapshot(
            sales=snap.sales,
            expenses=snap.expenses,
            banking_records=[banking("2024-01-10", 50000)],
        )
        ledger = normalizer.normalize(snapshot=snap)

        balance = calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 1, 11))

        assert balance == Decimal("20000")

    def test_transaction_at_as_of_excluded(self, normalizer, calculator):
        ledger = normalizer.normalize(
            snapshot=snapshot(sales=[sale("2024-01-10T09:00:00", amount_paid=500)])
        )

        assert calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 1, 10, 9)) == 0
        assert calculator.balance_as_of(
            ledger=ledger, as_of=datetime(2024, 1, 10, 9, 0, 0, 1)
        ) == Decimal("500")

    def test_none_is_beginning_of_time(self, normalizer, calculator):
        ledger = normalizer.normalize(snapshot=_scenario_a())
        assert calculator.balance_as_of(ledger=ledger, as_of=None) == Decimal("0")

    def test_empty_ledger(self, normalizer, calculator):
        ledger = normalizer.normalize(snapshot=snapshot())
        assert calculator.balance_as_of(ledger=ledger, as_of=datetime(2030, 1, 1)) == 0

    def test_balance_can_go_negative(self, normalizer, calculator):
        ledger = normalizer.normalize(snapshot=snapshot(expenses=[expense("2024-01-10", 250)]))
        assert calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 2, 1)) == Decimal("-250")

    def test_undated_transactions_never_count(self, normalizer, calculator):
        ledger = normalizer.normalize(
            snapshot=snapshot(expenses=[expense("2024-01-10", 100), expense("garbage", 999)])
        )

        assert calculator.balance_as_of(ledger=ledger, as_of=datetime(2099, 1, 1)) == Decimal("-100")

    def test_retroactive_correction_reflected(self, normalizer, calculator):
        """Editing a historical record changes every later balance immediately."""
        as_of = datetime(2024, 3, 1)
        before = normalizer.normalize(snapshot=snapshot(expenses=[expense("2024-01-05", 100, expense_id="e1")]))
        after = normalizer.normalize(snapshot=snapshot(expenses=[expense("2024-01-05", 40, expense_id="e1")]))

        assert calculator.balance_as_of(ledger=before, as_of=as_of) == Decimal("-100")
        assert calculator.balance_as_of(ledger=after, as_of=as_of) == Decimal("-40")

    def test_decimal_exactness(self, normalizer, calculator):
        ledger = normalizer.normalize(
            snapshot=snapshot(
                sales=[sale("2024-01-10", amount_paid=0.1), sale("2024-01-10", amount_paid=0.2)]
            )
        )

        assert calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 1, 11)) == Decimal("0.3")


class TestWindowTotals:
    """Tests for totals_between and net_flow."""

    def test_totals_between_half_open(self, normalizer, calculator):
        ledger = normalizer.normalize(
            snapshot=snapshot(
                sales=[sale("2024-01-10", amount_paid=1000), sale("2024-01-12", amount_paid=7)],
                expenses=[expense("2024-01-10T12:00:00", 300)],
                banking_records=[banking("2024-01-11", 200)],
            )
        )

        totals = calculator.totals_between(ledger, datetime(2024, 1, 10), datetime(2024, 1, 12))

        assert totals.income == Decimal("1000")
        assert totals.expense == Decimal("300")
        assert totals.banked == Decimal("200")
        assert totals.net == Decimal("500")

    def test_open_bounds(self, normalizer, calculator):
        ledger = normalizer.normalize(snapshot=_scenario_a())

        assert calculator.net_flow(ledger, None, None) == Decimal("70000")
        assert calculator.net_flow(ledger, datetime(2024, 1, 11), None) == 0

    def test_additivity(self, normalizer, calculator):
        ledger = normalizer.normalize(
            snapshot=snapshot(
                sales=[sale("2024-01-03", amount_paid=900), sale("2024-01-20", amount_paid=50)],
                expenses=[expense("2024-01-10", 120)],
                banking_records=[banking("2024-01-15", 400)],
            )
        )
        split, as_of = datetime(2024, 1, 10), datetime(2024, 1, 21)

        assert calculator.balance_as_of(ledger=ledger, as_of=as_of) == (
            calculator.balance_as_of(ledger=ledger, as_of=split)
            + calculator.net_flow(ledger, split, as_of)
        )


class TestAwareInstants:
    """Aware as_of and window bounds are read in the ledger zone."""

    def _late_evening_ledger(self, normalizer):
        # 23:30 local on the 10th
        return normalizer.normalize(
            snapshot=snapshot(sales=[sale("2024-01-10T23:30:00", amount_paid=800)])
        )

    def test_balance_as_of_aware(self, normalizer):
        calculator = BalanceCalculator(KAMPALA)
        ledger = self._late_evening_ledger(normalizer)

        # 20:00 UTC is 23:00 in Kampala, 21:00 UTC is midnight
        assert calculator.balance_as_of(
            ledger=ledger, as_of=datetime(2024, 1, 10, 20, tzinfo=timezone.utc)
        ) == 0
        assert calculator.balance_as_of(
            ledger=ledger, as_of=datetime(2024, 1, 10, 21, tzinfo=timezone.utc)
        ) == Decimal("800")

    def test_totals_between_aware(self, normalizer):
        calculator = BalanceCalculator(KAMPALA)
        ledger = self._late_evening_ledger(normalizer)

        totals = calculator.totals_between(
            ledger,
            datetime(2024, 1, 10, 20, tzinfo=timezone.utc),
            datetime(2024, 1, 10, 21, tzinfo=timezone.utc),
        )

        assert totals.income == Decimal("800")

    def test_aware_and_naive_agree(self, normalizer):
        calculator = BalanceCalculator(KAMPALA)
        ledger = self._late_evening_ledger(normalizer)

        assert calculator.net_flow(
            ledger, None, datetime(2024, 1, 10, 21, tzinfo=timezone.utc)
        ) == calculator.net_flow(ledger, None, datetime(2024, 1, 11))

    def test_aware_as_of_without_zone_does_not_raise(self, normalizer, calculator):
        ledger = self._late_evening_ledger(normalizer)

        # Converted to the host zone; the sale is long past either way
        balance = calculator.balance_as_of(
            ledger=ledger, as_of=datetime(2024, 6, 1, tzinfo=timezone.utc)
        )

        assert balance == Decimal("800")
