"""Read-only ledger view with windowing, classification and aggregation helpers"""

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, Iterator, List, Optional

from spend_guard.domain.categories import UNCATEGORIZED, classify
from spend_guard.domain.models import Classification, Direction, MonthlyAggregate, Transaction
from spend_guard.utils.date_utils import month_key


class LedgerView:
    """
    Immutable snapshot of a user's transactions.

    Every engine component reads from a LedgerView fetched once per request, so
    all figures in one computation are consistent with each other.
    """

    def __init__(self, transactions: Iterable[Transaction]):
        self._transactions: List[Transaction] = sorted(transactions, key=lambda t: t.timestamp)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    def window(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> "LedgerView":
        """Transactions with start <= timestamp <= end (either bound optional)"""
        return LedgerView(
            t
            for t in self._transactions
            if (start is None or t.timestamp >= start) and (end is None or t.timestamp <= end)
        )

    def filter(
        self,
        direction: Optional[Direction] = None,
        classification: Optional[Classification] = None,
    ) -> "LedgerView":
        return LedgerView(
            t
            for t in self._transactions
            if (direction is None or t.direction == direction)
            and (classification is None or classify(t.direction, t.category) == classification)
        )

    def income(self) -> "LedgerView":
        return self.filter(direction=Direction.INCOME)

    def expenses(self) -> "LedgerView":
        return self.filter(direction=Direction.EXPENSE)

    def essential(self) -> "LedgerView":
        return self.filter(classification=Classification.ESSENTIAL)

    def non_essential(self) -> "LedgerView":
        return self.filter(classification=Classification.NON_ESSENTIAL)

    def sum(
        self,
        direction: Optional[Direction] = None,
        classification: Optional[Classification] = None,
    ) -> float:
        return sum(t.amount for t in self.filter(direction, classification))

    def daily_average(self, days: int) -> float:
        """Average daily expense over a window of `days` days"""
        return self.sum(direction=Direction.EXPENSE) / max(1, days)

    def group_by_month(self) -> Dict[str, MonthlyAggregate]:
        """Per-calendar-month aggregates keyed 'YYYY-MM', in chronological order"""
        months: Dict[str, MonthlyAggregate] = {}
        for t in self._transactions:
            bucket = months.setdefault(month_key(t.day), MonthlyAggregate())
            bucket.transaction_count += 1
            if t.direction == Direction.INCOME:
                bucket.income += t.amount
            else:
                bucket.total_expense += t.amount
                if classify(t.direction, t.category) == Classification.NON_ESSENTIAL:
                    bucket.non_essential_expense += t.amount
        return dict(sorted(months.items()))

    def group_by_day(self) -> Dict[date, float]:
        """Expense total per calendar day"""
        totals: Dict[date, float] = defaultdict(float)
        for t in self._transactions:
            if t.direction == Direction.EXPENSE:
                totals[t.day] += t.amount
        return dict(totals)

    def by_category(self) -> Dict[str, float]:
        """Expense total per category label"""
        totals: Dict[str, float] = defaultdict(float)
        for t in self._transactions:
            if t.direction == Direction.EXPENSE:
                totals[t.category or UNCATEGORIZED] += t.amount
        return dict(totals)
