"""
Errors raised by the purchase calculation pipeline.

The pipeline validates its numeric inputs before doing any arithmetic, so a
caller either gets a complete result or one of these exceptions.
"""


class PurchaseCalculationError(Exception):
    """Base exception for purchase calculation errors"""
    pass


class InvalidArgument(PurchaseCalculationError, ValueError):
    """Raised when a required numeric input is not actually numeric"""

    def __init__(self, param: str, value=None):
        self.param = param
        self.value = value
        super().__init__(f"Invalid numeric value for '{param}': {value!r}")
