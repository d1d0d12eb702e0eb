"""The Raven scripting language: lexer, parser, type checker and interpreter."""

__version__ = "0.1.0"
