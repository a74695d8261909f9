"""Parsed-template cache.

Templates are re-evaluated on every form change, so each distinct template
string is parsed once and the resulting TemplateExpression reused. Parsed
expressions are immutable and safe to share between threads.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable

from smartform.template.parser import TemplateExpression, parse_template

logger = logging.getLogger(__name__)


class ExpressionCache:
    """Thread-safe cache of parsed templates.

    Lookups read an immutable snapshot without locking; inserts copy the
    snapshot under a lock. With max_entries > 0 the least recently used
    entry is evicted once the cap is reached.

    Example:
        cache = ExpressionCache()
        expr = cache.get_or_parse("Hello, ${name}")
        assert cache.get_or_parse("Hello, ${name}") is expr
    """

    def __init__(
        self,
        max_entries: int = 0,
        parser: Callable[[str], TemplateExpression] = parse_template,
    ):
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._parser = parser
        self._lock = threading.Lock()
        self._entries: dict[str, TemplateExpression] = {}
        self._recency: OrderedDict[str, None] = OrderedDict()

    def get_or_parse(self, raw: str) -> TemplateExpression:
        """Return the cached parse of raw, parsing it on first use.

        Raises:
            ParseError: If raw is not a valid template (failures are not cached)
        """
        expression = self._entries.get(raw)
        if expression is not None:
            if self.max_entries:
                self._touch(raw)
            return expression

        expression = self._parser(raw)
        logger.debug("Parsed template %r into %d part(s)", raw, len(expression.parts))

        with self._lock:
            existing = self._entries.get(raw)
            if existing is not None:
                return existing

            entries = dict(self._entries)
            entries[raw] = expression
            if self.max_entries:
                self._recency[raw] = None
                while len(entries) > self.max_entries:
                    evicted, _ = self._recency.popitem(last=False)
                    entries.pop(evicted, None)
                    logger.debug("Evicted template %r from cache", evicted)
            self._entries = entries

        return expression

    def _touch(self, raw: str) -> None:
        with self._lock:
            if raw in self._recency:
                self._recency.move_to_end(raw)

    def clear(self) -> None:
        """Drop all cached templates."""
        with self._lock:
            self._entries = {}
            self._recency.clear()

    def __contains__(self, raw: object) -> bool:
        return raw in self._entries

    def __len__(self) -> int:
        return len(self._entries)
