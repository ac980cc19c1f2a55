"""File format readers used by shelltree."""

from .properties import PropertiesSyntaxError, load_properties, parse_properties

__all__ = ["PropertiesSyntaxError", "load_properties", "parse_properties"]
