"""
Core type definitions for formtree.

This module contains fundamental type aliases used throughout formtree for
type safety and consistency.
"""

from typing import Any

# Nested specification literal, keyed by field or container name
SpecificationLiteral = dict[str, Any]

# Name, flat list of names, nested {container: [...]} map, or a mix of both
ValidationGroupSelector = str | list | tuple | set | frozenset | dict

NestedValues = dict[str, Any]
