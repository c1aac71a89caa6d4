from typing import List, Optional

class EdiConversionError(Exception):
    """Base class for conditions the caller is expected to report back to the user."""

class InvalidEdiInputError(EdiConversionError):
    """The input is not usable EDI. `reason` is the short label reported to the caller."""

    def __init__(self, message: str, reason: str = "Invalid input"):
        self.reason = reason
        super().__init__(message)

class UndeterminedTransactionError(EdiConversionError):
    """No transaction set id was requested and none could be detected from an ST segment."""

    def __init__(self, message: str = "Could not detect transaction set from ST segment"):
        super().__init__(message)

class UnsupportedTransactionError(EdiConversionError):
    """No template is registered for the detected or requested transaction set."""

    def __init__(self, transaction_type: str, detected_type: Optional[str], available_types: List[str]):
        self.transaction_type = transaction_type
        self.detected_type = detected_type
        self.available_types = list(available_types)
        super().__init__(f"No template available for transaction set: {transaction_type}")
