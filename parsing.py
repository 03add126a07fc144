"""
StrLang Lexer and Parser
Turns source text into tokens, and tokens into an ordered list of statements
"""

from typing import List, Optional, Union
from dataclasses import dataclass
import re
import sys

from error_handling import SourceSpan, LexError, ParseError, make_span


# Token kinds
IDENTIFIER = "IDENTIFIER"
KEYWORD = "KEYWORD"
STRING = "STRING"
EQUALS = "EQUALS"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
SEMICOLON = "SEMICOLON"
EOF = "EOF"

PRINT = "print"


@dataclass(frozen=True)
class Token:
    """StrLang token with source information"""
    type: str
    value: Optional[str]
    span: SourceSpan

    def __str__(self) -> str:
        if self.value is None:
            return self.type
        return f"{self.type}({self.value!r})"

    def describe(self) -> str:
        """Human readable form used in parse errors"""
        if self.type == EOF:
            return "end of input"
        if self.type == STRING:
            return f'string literal "{self.value}"'
        return f"'{self.span.text}'"


@dataclass(frozen=True)
class Declaration:
    """name = string("literal");"""
    name: str
    literal: str
    span: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Print:
    """print(name);"""
    name: str
    span: Optional[SourceSpan] = None


Statement = Union[Declaration, Print]


# ============================================================================
# LEXER
# ============================================================================

class StrLangTokenizer:
    """Single pass scanner over the original source text"""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        self.identifier_pattern = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
        self.whitespace_pattern = re.compile(r'[ \t\r\n]+')

        self.keywords = {'string'}

        self.punctuation = {
            '=': EQUALS,
            '(': LPAREN,
            ')': RPAREN,
            ';': SEMICOLON,
        }

    def tokenize(self, text: str) -> List[Token]:
        tokens = []
        pos = 0

        while pos < len(text):
            ws_match = self.whitespace_pattern.match(text, pos)
            if ws_match:
                pos = ws_match.end()
                continue

            char = text[pos]

            if char == '"':
                # No escapes: the literal ends at the next quote
                end = text.find('"', pos + 1)
                if end == -1:
                    raise LexError(
                        "unterminated string literal",
                        self._span(text, pos, text[pos:])
                    )
                raw = text[pos:end + 1]
                tokens.append(Token(STRING, raw[1:-1], self._span(text, pos, raw)))
                pos = end + 1
                continue

            if char in self.punctuation:
                tokens.append(Token(self.punctuation[char], None, self._span(text, pos, char)))
                pos += 1
                continue

            id_match = self.identifier_pattern.match(text, pos)
            if id_match:
                value = id_match.group(0)
                kind = KEYWORD if value in self.keywords else IDENTIFIER
                tokens.append(Token(kind, value, self._span(text, pos, value)))
                pos = id_match.end()
                continue

            raise LexError(f"unexpected character {char!r}", self._span(text, pos, char))

        tokens.append(Token(EOF, None, self._span(text, len(text))))
        return tokens

    def _span(self, text: str, offset: int, raw: str = "") -> SourceSpan:
        return make_span(text, offset, raw, self.filename)


def tokenize(source: str, filename: str = "<input>") -> List[Token]:
    """Tokenize StrLang source code"""
    return StrLangTokenizer(filename).tokenize(source)


# ============================================================================
# PARSER
# ============================================================================

class StrLangParser:
    """LL(1) parser over a token list ending in EOF"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.tokens: List[Token] = []
        self.pos = 0

    def parse(self, tokens: List[Token]) -> List[Statement]:
        if not tokens or tokens[-1].type != EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0

        statements = []
        while self._peek().type != EOF:
            stmt = self._statement()
            if self.debug:
                print(f"[parse] {stmt}", file=sys.stderr)
            statements.append(stmt)
        return statements

    def _statement(self) -> Statement:
        head = self._expect(IDENTIFIER, "statement")
        follow = self._peek()

        if follow.type == EQUALS:
            return self._declaration(head)
        if follow.type == LPAREN and head.value == PRINT:
            return self._print_statement(head)
        if head.value == PRINT:
            raise self._error("'=' or '('")
        raise self._error("'='")

    def _declaration(self, name: Token) -> Declaration:
        self._expect(EQUALS, "'='")
        self._expect(KEYWORD, "'string'")
        self._expect(LPAREN, "'('")
        literal = self._expect(STRING, "string literal")
        self._expect(RPAREN, "')'")
        self._expect(SEMICOLON, "';'")
        return Declaration(name.value, literal.value, name.span)

    def _print_statement(self, keyword: Token) -> Print:
        self._expect(LPAREN, "'('")
        name = self._expect(IDENTIFIER, "identifier")
        self._expect(RPAREN, "')'")
        self._expect(SEMICOLON, "';'")
        return Print(name.value, name.span)

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _expect(self, kind: str, expected: str) -> Token:
        token = self._peek()
        if token.type != kind:
            raise self._error(expected)
        # EOF is never consumed, so pos stays in range
        self.pos += 1
        return token

    def _error(self, expected: str) -> ParseError:
        token = self._peek()
        return ParseError(expected, token.describe(), token.span)


def parse(tokens: List[Token], debug: bool = False) -> List[Statement]:
    """Parse a token list into statements"""
    return StrLangParser(debug).parse(tokens)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> StrLangParser:
    """Create a StrLang parser"""
    return StrLangParser(debug=debug)


def create_debug_parser() -> StrLangParser:
    """Create a StrLang parser with debug enabled"""
    return StrLangParser(debug=True)


def format_statement(stmt: Statement) -> str:
    """Render a statement back in source form"""
    if isinstance(stmt, Declaration):
        return f'{stmt.name} = string("{stmt.literal}");'
    return f"print({stmt.name});"


def pretty_print_program(program: List[Statement]) -> str:
    """Pretty print a statement list for debugging"""
    result = ""
    for i, stmt in enumerate(program, 1):
        location = f"  [{stmt.span}]" if stmt.span else ""
        result += f"{i:4d}: {type(stmt).__name__:<12} {format_statement(stmt)}{location}\n"
    return result
