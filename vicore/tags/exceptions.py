"""Custom exceptions for tag navigation."""


class TagError(LookupError):
    """Base class for tag navigation failures."""


class TagNotFoundError(TagError):
    """Exception raised when no tag record exists for a symbol."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tag not found: {name}")


class EmptyStackError(TagError):
    """Exception raised when popping with no frame to return to."""

    def __init__(self) -> None:
        super().__init__("Top of stack")


class PatternNotFoundError(TagError):
    """Exception raised when a tag's search pattern does not occur in the buffer."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Not found: {pattern}")


class UnrecognizedLocateExpressionError(TagError):
    """Exception raised for a tag address that is neither a line number nor a pattern."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"Unrecognized tag address: {expression}")
