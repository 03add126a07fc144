"""
Error taxonomy and diagnostics for StrLang
Every stage fails fast with one of these; nothing is recovered internally
"""

from dataclasses import dataclass
from typing import List, Optional

from pyparsing import col, line, lineno


# ============================================================================
# SOURCE LOCATIONS
# ============================================================================

@dataclass(frozen=True)
class SourceSpan:
    """Source location of a token or statement"""
    filename: str
    line: int
    column: int
    offset: int
    text: str = ""

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


def make_span(source_text: str, offset: int, text: str = "", filename: str = "<input>") -> SourceSpan:
    """Build a span for `text` found at `offset` in `source_text`"""
    return SourceSpan(
        filename,
        lineno(offset, source_text),
        col(offset, source_text),
        offset,
        text
    )


def get_context_lines(source_text: str, span: SourceSpan, context_lines: int = 2) -> str:
    """Render the lines leading up to the error with a caret under the column"""
    lines = source_text.split('\n')
    start_line = max(0, span.line - context_lines - 1)

    context_parts = []
    for i in range(start_line, min(span.line - 1, len(lines))):
        context_parts.append(f"{i+1:4d}: {lines[i]}")

    error_line = line(span.offset, source_text) if span.offset < len(source_text) else lines[-1]
    context_parts.append(f"{span.line:4d}: {error_line}")
    context_parts.append(f"{'':6}{' ' * (span.column - 1)}^")

    return '\n'.join(context_parts)


# ============================================================================
# ERRORS
# ============================================================================

class StrLangError(Exception):
    """Base class for every error that aborts a StrLang run"""
    kind = "Error"

    def __init__(self, message: str, span: Optional[SourceSpan] = None, context: str = ""):
        self.message = message
        self.span = span
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.span:
            result = f"{self.kind} at {self.span}: {self.message}"
        else:
            result = f"{self.kind}: {self.message}"
        if self.context:
            result += f"\n{self.context}"
        return result


class LexError(StrLangError):
    """Malformed token stream: unterminated literal or illegal character"""
    kind = "Lex error"


class ParseError(StrLangError):
    """Token stream does not match the grammar"""
    kind = "Parse error"

    def __init__(self, expected: str, found: str, span: Optional[SourceSpan] = None):
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, got {found}", span)

    @property
    def position(self) -> Optional[SourceSpan]:
        return self.span


class UndefinedVariable(StrLangError):
    """print referenced a name that was never declared"""
    kind = "Runtime error"

    def __init__(self, name: str, span: Optional[SourceSpan] = None, output: Optional[List[str]] = None):
        self.name = name
        # Lines printed before the failing statement
        self.output = list(output or [])
        super().__init__(f"undefined variable '{name}'", span)


# ============================================================================
# ERROR HANDLER
# ============================================================================

class StrLangErrorHandler:
    """Attaches source context to errors raised while running `source_text`"""

    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance(self, error: StrLangError) -> StrLangError:
        if error.span and not error.context:
            error.context = get_context_lines(self.source_text, error.span)
        return error

    def format(self, error: StrLangError) -> str:
        return str(self.enhance(error))
