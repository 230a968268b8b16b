from dataclasses import dataclass


@dataclass
class BudgetSnapshot:
    monthly_budget: int
    month_spent: int
    today_spent: int
    daily_allowance: int

    @property
    def percentage(self) -> float:
        if self.monthly_budget <= 0:
            return 0.0
        return self.month_spent / self.monthly_budget

    @property
    def today_remaining(self) -> int:
        return self.daily_allowance - self.today_spent

    @property
    def is_over_budget(self) -> bool:
        return self.today_remaining < 0

    @property
    def month_remaining(self) -> int:
        return self.monthly_budget - self.month_spent
