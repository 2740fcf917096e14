"""
Tokenizer and recursive descent parser for the nginx-like config syntax.

Example:
    web {
        listen "0.0.0.0";
        port 9100;
    }

    collectors {
        edac on;
        stat off;
    }

    include "conf.d/*.conf";

Supports quoted strings with escapes, numbers, durations (10s, 5m, 1h),
booleans (on/off/true/false), # and /* */ comments, and include
statements with glob patterns.
"""

import glob
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class TokenType(Enum):
    """Token types."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    DURATION = auto()  # value converted to seconds
    BOOLEAN = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()
    INCLUDE = auto()
    EOF = auto()


@dataclass
class Token:
    """A single token."""

    type: TokenType
    value: Any
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class LexerError(Exception):
    """Exception raised for tokenizer errors."""

    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, column {column}: {message}")


class ParseError(Exception):
    """Exception raised for parser errors."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"Line {token.line}, column {token.column}: {message}")
        else:
            super().__init__(message)


BOOLEAN_KEYWORDS = {"on": True, "off": False, "true": True, "false": False}

# Duration units in seconds
DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600, "d": 86400}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<comment>\#[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    | (?P<number>[0-9]+(?:\.[0-9]+)?)(?P<unit>[A-Za-z]+)?
    | (?P<ident>[A-Za-z_][A-Za-z0-9_-]*)
    | (?P<punct>[{};])
    """,
    re.VERBOSE | re.DOTALL,
)

PUNCTUATION = {"{": TokenType.LBRACE, "}": TokenType.RBRACE, ";": TokenType.SEMICOLON}


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: ESCAPES.get(m.group(1), m.group(1)), body, flags=re.DOTALL)


def tokenize(source: str) -> list[Token]:
    """
    Split source into tokens, ending with an EOF token.

    Raises:
        LexerError: On unterminated strings/comments, unknown duration
            units or unexpected characters
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    line_start = 0

    while pos < len(source):
        column = pos - line_start + 1
        match = TOKEN_RE.match(source, pos)

        if match is None:
            if source.startswith("/*", pos):
                raise LexerError("Unterminated multi-line comment", line, column)
            if source[pos] in "\"'":
                raise LexerError("Unterminated string literal", line, column)
            raise LexerError(f"Unexpected character: {source[pos]!r}", line, column)

        kind = match.lastgroup if match.lastgroup != "unit" else "number"
        text = match.group(0)

        if kind == "string":
            tokens.append(Token(TokenType.STRING, _unescape(text[1:-1]), line, column))
        elif kind == "number":
            number_text = match.group("number")
            number = float(number_text) if "." in number_text else int(number_text)
            unit = match.group("unit")
            if unit is None:
                tokens.append(Token(TokenType.NUMBER, number, line, column))
            elif unit.lower() in DURATION_UNITS:
                seconds = number * DURATION_UNITS[unit.lower()]
                tokens.append(Token(TokenType.DURATION, seconds, line, column))
            else:
                raise LexerError(f"Unknown duration unit: {unit}", line, column)
        elif kind == "ident":
            lowered = text.lower()
            if lowered in BOOLEAN_KEYWORDS:
                tokens.append(Token(TokenType.BOOLEAN, BOOLEAN_KEYWORDS[lowered], line, column))
            elif lowered == "include":
                tokens.append(Token(TokenType.INCLUDE, text, line, column))
            else:
                tokens.append(Token(TokenType.IDENTIFIER, text, line, column))
        elif kind == "punct":
            tokens.append(Token(PUNCTUATION[text], text, line, column))

        newlines = text.count("\n")
        if newlines:
            line += newlines
            line_start = pos + text.rindex("\n") + 1
        pos = match.end()

    tokens.append(Token(TokenType.EOF, "", line, pos - line_start + 1))
    return tokens


@dataclass
class Directive:
    """
    A directive with a name and values.

    Examples:
        port 9100;       -> Directive(name="port", values=[9100])
        edac on;         -> Directive(name="edac", values=[True])
    """

    name: str
    values: list[Any] = field(default_factory=list)
    line: int = 0
    column: int = 0

    @property
    def value(self) -> Any:
        """First value or None."""
        return self.values[0] if self.values else None


@dataclass
class Block:
    """
    A block with a type, optional name, and contents.

    Examples:
        web { ... }           -> Block(type="web", name=None, ...)
        edac "local" { ... }  -> Block(type="edac", name="local", ...)
    """

    type: str
    name: str | None = None
    directives: list[Directive] = field(default_factory=list)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0
    column: int = 0

    def get_directive(self, name: str) -> Directive | None:
        """Last directive with the given name (later ones override)."""
        for directive in reversed(self.directives):
            if directive.name == name:
                return directive
        return None

    def get_value(self, name: str, default: Any = None) -> Any:
        """Single value of a directive, or default."""
        directive = self.get_directive(name)
        if directive is None or directive.value is None:
            return default
        return directive.value


@dataclass
class ConfigDocument:
    """Root document: top-level blocks and directives."""

    blocks: list[Block] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    filename: str = "<string>"

    def get_blocks(self, type_name: str) -> list[Block]:
        """All blocks with the given type."""
        return [b for b in self.blocks if b.type == type_name]

    def merge(self, other: "ConfigDocument") -> None:
        """Merge another document into this one (for includes)."""
        self.blocks.extend(other.blocks)
        self.directives.extend(other.directives)


VALUE_TOKENS = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.DURATION,
    TokenType.BOOLEAN,
    TokenType.IDENTIFIER,
)


class ConfigParser:
    """
    Recursive descent parser.

    Grammar:
        document    := (block | directive | include)*
        block       := IDENTIFIER [STRING] '{' (block | directive | include)* '}'
        directive   := IDENTIFIER value* ';'
        value       := STRING | NUMBER | DURATION | BOOLEAN | IDENTIFIER
        include     := 'include' STRING ';'
    """

    def __init__(
        self,
        source: str,
        filename: str = "<string>",
        base_path: Path | None = None,
        included_files: set[str] | None = None,
    ):
        self.filename = filename
        self.base_path = base_path or Path.cwd()
        self.included_files = included_files or set()
        try:
            self.tokens = tokenize(source)
        except LexerError as e:
            raise LexerError(f"{filename}: {e.message}", e.line, e.column) from e
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType, message: str = "") -> Token:
        if self.current.type != token_type:
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self._advance()

    def parse(self) -> ConfigDocument:
        """Parse the whole document."""
        doc = ConfigDocument(filename=self.filename)

        while self.current.type != TokenType.EOF:
            if self.current.type == TokenType.INCLUDE:
                doc.merge(self._parse_include())
            elif self.current.type == TokenType.IDENTIFIER:
                item = self._parse_item()
                (doc.blocks if isinstance(item, Block) else doc.directives).append(item)
            else:
                raise ParseError(
                    f"Expected block, directive, or include; got {self.current.type.name}",
                    self.current,
                )

        return doc

    def _parse_item(self) -> Block | Directive:
        name_token = self._expect(TokenType.IDENTIFIER)
        name = str(name_token.value)

        values: list[Any] = []
        while self.current.type in VALUE_TOKENS:
            values.append(self._advance().value)

        if self.current.type == TokenType.SEMICOLON:
            self._advance()
            return Directive(name, values, name_token.line, name_token.column)

        if self.current.type != TokenType.LBRACE:
            raise ParseError(f"Expected '{{' or ';' after directive '{name}'", self.current)

        if len(values) > 1 or (values and not isinstance(values[0], str)):
            raise ParseError(f"Block '{name}' takes at most one string name", self.current)

        self._advance()
        block = Block(
            type=name,
            name=values[0] if values else None,
            line=name_token.line,
            column=name_token.column,
        )

        while self.current.type not in (TokenType.RBRACE, TokenType.EOF):
            if self.current.type == TokenType.INCLUDE:
                included = self._parse_include()
                block.directives.extend(included.directives)
                block.blocks.extend(included.blocks)
            elif self.current.type == TokenType.IDENTIFIER:
                item = self._parse_item()
                (block.blocks if isinstance(item, Block) else block.directives).append(item)
            else:
                raise ParseError(
                    f"Expected directive or nested block in '{name}' block", self.current
                )

        self._expect(TokenType.RBRACE, f"Expected '}}' to close '{name}' block")
        return block

    def _parse_include(self) -> ConfigDocument:
        include_token = self._expect(TokenType.INCLUDE)
        path_token = self._expect(TokenType.STRING, "Expected file path after 'include'")
        self._expect(TokenType.SEMICOLON, "Expected ';' after include path")

        pattern = Path(str(path_token.value))
        if not pattern.is_absolute():
            pattern = self.base_path / pattern

        # No match is not an error
        merged = ConfigDocument()
        for path in sorted(glob.glob(str(pattern))):
            path_obj = Path(path)
            resolved = str(path_obj.resolve())
            if resolved in self.included_files:
                raise ParseError(f"Circular include detected: {path}", include_token)

            parser = ConfigParser(
                source=path_obj.read_text(),
                filename=path,
                base_path=path_obj.parent,
                included_files=self.included_files | {resolved},
            )
            merged.merge(parser.parse())

        return merged


def parse_config(
    source: str, filename: str = "<string>", base_path: Path | None = None
) -> ConfigDocument:
    """Parse a configuration string."""
    return ConfigParser(source, filename, base_path).parse()


def parse_config_file(path: str | Path) -> ConfigDocument:
    """Parse a configuration file; includes resolve relative to its directory."""
    path = Path(path)
    resolved = str(path.resolve())
    parser = ConfigParser(path.read_text(), str(path), path.parent, {resolved})
    return parser.parse()
