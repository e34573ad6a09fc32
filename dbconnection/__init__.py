"""Thin psycopg2 wrapper: list-aware named parameters and two query shapes."""

from .connection import DatabaseConnection, parse_host
from .statement import BoundParam, ParamType, Statement, build_statement, expand_params

__all__ = [
    "DatabaseConnection",
    "parse_host",
    "BoundParam",
    "ParamType",
    "Statement",
    "build_statement",
    "expand_params",
]
