"""Sample expenses inserted by ExpenseStore.seed() on an empty store."""

from typing import NamedTuple, Optional

from expense_notes.models.expense import PaidStatus


class SampleExpense(NamedTuple):
    title: str
    amount: float
    category: Optional[str]
    paid: PaidStatus


SAMPLE_EXPENSES: tuple[SampleExpense, ...] = (
    SampleExpense("Cà phê", 30000, "Ăn uống", PaidStatus.PAID),
    SampleExpense("Đổ xăng", 50000, "Di chuyển", PaidStatus.PAID),
    # A bill still waiting to be paid
    SampleExpense("Tiền điện", 450000, "Hóa đơn", PaidStatus.UNPAID),
)
