class ConfigurationError(ValueError):
    """Invalid construction parameters for a PriorityQueue."""


class EmptyContainerError(IndexError):
    """Raised when reading the top of an empty PriorityQueue."""


class CapacityExhaustionError(MemoryError):
    """The backing buffers could not be grown."""


class IdSpaceExhaustionError(OverflowError):
    """No insertion id is left, even after consolidating the live ids."""


class PriorityParseError(ValueError):
    """A game file line whose priority could not be read."""

    def __init__(self, line_number: int, text: str, reason: str = ""):
        self.line_number = line_number
        self.text = text
        message = f"There was a problem reading in the priority on line {line_number}: {text!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
