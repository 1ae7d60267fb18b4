"""
Oleang Blog API: Abstract Remote Store Interface
================================================

What:  Abstract base class defining the contract for the hosted data/auth
       platform the API forwards to.
How:   Concrete implementations inherit from RemoteStore and implement the
       table operations, stored-procedure calls and identity calls.
Who:   Called by the post, like, comment and user services.

Query vocabulary:
    Filters are plain values built with `eq()` and `ilike()`. Columns follow
    PostgREST select syntax, so an embedded resource is requested as
    "id, title, categories(name)".
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

Row = Dict[str, Any]


class Filter(NamedTuple):
    """One column predicate: `column <op> value`."""

    column: str
    op: str
    value: Any


def eq(column: str, value: Any) -> Filter:
    """Exact match."""
    return Filter(column, "eq", value)


def ilike(column: str, pattern: str) -> Filter:
    """Case-insensitive LIKE; `%` is the wildcard."""
    return Filter(column, "ilike", pattern)


class AuthUser(NamedTuple):
    """Identity returned by the auth subsystem."""

    id: str
    email: Optional[str]
    raw: Row


class RemoteStore(ABC):
    """
    Abstract interface for the hosted data/auth platform.

    Contract:
        - Table calls return lists of row dicts (never None)
        - Write calls return the affected rows as stored
        - Unique violations raise StoreConflictError
        - Identity failures raise StoreAuthError
        - Any other upstream failure raises StoreError

    Implementations:
        - SupabaseStore: PostgREST + GoTrue over httpx
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Read rows matching every filter."""
        ...

    @abstractmethod
    async def insert(self, table: str, rows: List[Row]) -> List[Row]:
        """Insert rows and return them as stored (ids, defaults filled)."""
        ...

    @abstractmethod
    async def update(
        self, table: str, values: Row, filters: Sequence[Filter]
    ) -> List[Row]:
        """Apply `values` to every matching row; returns the updated rows."""
        ...

    @abstractmethod
    async def delete(self, table: str, filters: Sequence[Filter]) -> List[Row]:
        """Delete every matching row; returns the deleted rows."""
        ...

    @abstractmethod
    async def rpc(self, function: str, params: Optional[Row] = None) -> Any:
        """Execute a stored procedure and return its result."""
        ...

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: Optional[Row] = None
    ) -> AuthUser:
        """Create an identity in the auth subsystem."""
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Authenticate with email and password."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the store is reachable and accepts our credentials.

        Returns: True if reachable, False otherwise. Never raises.
        """
        ...

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
    ) -> Optional[Row]:
        """First matching row, or None."""
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def close(self) -> None:
        """Release network resources. No-op by default."""
        return None
