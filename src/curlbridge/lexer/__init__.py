"""Lexical layer: tokens, shell words and offset mapping."""

from curlbridge.lexer.positions import LineIndex
from curlbridge.lexer.tokenizer import PLACEHOLDER_RE, tokenize
from curlbridge.lexer.tokens import Token, TokenKind, Word, group_words, looks_like_url

__all__ = [
    "PLACEHOLDER_RE",
    "LineIndex",
    "Token",
    "TokenKind",
    "Word",
    "group_words",
    "looks_like_url",
    "tokenize",
]
