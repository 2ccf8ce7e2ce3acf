"""
Diff parsing errors.
"""

from typing import Optional


class DiffParseError(ValueError):
    """Base class for recoverable diff parsing errors"""
    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line


class InvalidHeader(DiffParseError):
    """Hunk header does not match `@@ -O[,C] +N[,C] @@ [context]`"""
    pass


class UnparseableSection(DiffParseError):
    """File section whose boundary or paths cannot be determined"""
    pass
