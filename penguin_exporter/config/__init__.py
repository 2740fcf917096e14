"""
Configuration parsing module with nginx-like syntax support.
"""

from .loader import ConfigError, ConfigLoader, load_config
from .parser import ConfigParser, LexerError, ParseError, Token, TokenType, tokenize
from .schema import Config

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "ConfigParser",
    "LexerError",
    "ParseError",
    "Token",
    "TokenType",
    "load_config",
    "tokenize",
]
