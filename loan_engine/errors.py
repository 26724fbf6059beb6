class LoanEngineError(Exception):
    """Base class for failures raised by the loan engine."""


class InvalidInput(LoanEngineError, ValueError):
    """A value could not be turned into something the engine understands."""


class ScheduleDidNotConverge(LoanEngineError, RuntimeError):
    """The iteration ceiling was hit with a balance still outstanding."""

    def __init__(self, months: int, outstanding: float):
        self.months = months
        self.outstanding = outstanding
        super().__init__(
            f"Balance {outstanding:,.2f} still outstanding after {months} months; "
            "the EMI never covers the interest due"
        )
