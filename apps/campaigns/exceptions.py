class SpendLedgerError(Exception):
    """Base class for daily spend ledger errors."""


class InvalidAmount(SpendLedgerError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid spend amount {value!r}: must be a finite number >= 0")


class InvalidSpendDate(SpendLedgerError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid spend date {value!r}: expected an ISO-8601 date")


class DayNotEditable(SpendLedgerError):
    def __init__(self, day):
        self.day = day
        super().__init__(f"Spend for {day.isoformat()} can no longer be edited")
