"""Declarative field queries over the canonical buffer."""

from txquery.query.builder import BoundLog, EventFieldBuilder, QueryBuilder

__all__ = ["BoundLog", "EventFieldBuilder", "QueryBuilder"]
