"""Base classes for structural scanner plugins."""

from abc import ABC, abstractmethod

from ..models import Item, ScanResult, Statement


class Scanner(ABC):
    """Contract for scanners that turn one source file into items and statements.

    The classifiers only ever talk to a scanner through :meth:`scan` and the two
    predicates, so supporting another source ecosystem means writing another
    scanner rather than touching the classification rules.
    """

    name: str = ""
    entry_function: str = "main"

    @abstractmethod
    def scan(self, source: str) -> ScanResult:
        """Return top-level items and the entry function body.

        Raises ``ParseError`` when the source is not syntactically valid.
        """

    @abstractmethod
    def is_noop_statement(self, statement: Statement) -> bool:
        """Return True for the canonical greeting statement of a stub binary."""

    @abstractmethod
    def is_exported(self, item: Item) -> bool:
        """Return True when the item is part of the target's public surface."""
