"""
SQLAlchemyRecord — adapts a mapped instance + Session to the Record protocol.

    record = SQLAlchemyRecord(poll, session)
    record.record_type                              # "Poll"
    record.get_attribute("is_promoted")             # True
    record.count_by_attributes({"is_promoted": True})  # SELECT count(*) ...

The session is resolved at construction (explicit argument, else the
instance's own session). A record that cannot query is rejected up front.

Counting runs with autoflush disabled: a pending (not yet flushed) candidate
is not written just to be counted against itself.

With include_pending=True the count also reflects other instances of the
same class that the session is about to write:
    + new or modified instances that will match the filters
    - modified or deleted instances whose stored row matches but will not
The flush hook uses this so that two new holders in one flush are caught and
a demote-and-promote swap in one flush is accepted.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Set

from sqlalchemy import and_, func, inspect, or_, select
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import InstanceState, Session, object_session

from flagguard.engine.errors import FlagGuardAttributeError, FlagGuardTypeMismatchError
from flagguard.validators.base import ErrorCollector


def _same_value(value: Any, expected: Any) -> bool:
    if isinstance(expected, bool):
        return isinstance(value, bool) and value is expected
    return value == expected


class SQLAlchemyRecord:
    """Record view over a SQLAlchemy-mapped instance. Also carries its own ErrorCollector."""

    def __init__(
        self,
        instance: Any,
        session: Optional[Session] = None,
        *,
        include_pending: bool = False,
    ):
        try:
            state = inspect(instance)
            if not isinstance(state, InstanceState):
                raise NoInspectionAvailable(f"{type(instance).__name__} is not a mapped instance")
            mapper = state.mapper
        except NoInspectionAvailable as e:
            given = type(instance).__name__
            raise FlagGuardTypeMismatchError(
                f"Only SQLAlchemy-mapped instances are supported, {given} given.",
                given_type=given,
            ) from e

        session = session if session is not None else object_session(instance)
        if session is None:
            given = type(instance).__name__
            raise FlagGuardTypeMismatchError(
                f"{given} instance is not attached to a Session; cannot query.",
                given_type=given,
                record_type=given,
            )

        self.instance = instance
        self.include_pending = include_pending
        self._mapper = mapper
        self._session = session
        self.errors = ErrorCollector()

    @property
    def record_type(self) -> str:
        return type(self.instance).__name__

    @property
    def table_name(self) -> Optional[str]:
        return getattr(type(self.instance), "__tablename__", None)

    @property
    def session(self) -> Session:
        return self._session

    def get_attribute(self, name: str) -> Any:
        if name not in self._mapper.attrs:
            raise KeyError(name)
        return getattr(self.instance, name)

    def count_by_attributes(self, filters: Mapping[str, Any]) -> int:
        model = type(self.instance)
        criteria = []
        for name, value in filters.items():
            if name not in self._mapper.column_attrs:
                raise FlagGuardAttributeError(
                    f"{self.record_type} has no column attribute '{name}'",
                    record_type=self.record_type,
                    attribute=name,
                )
            criteria.append(getattr(model, name) == value)

        stmt = select(func.count()).select_from(model).where(*criteria)
        with self._session.no_autoflush:
            count = int(self._session.scalar(stmt) or 0)
            if self.include_pending:
                count += self._pending_delta(filters, criteria)
        return count

    def _peers(self) -> Iterable[Any]:
        model = type(self.instance)
        seen = set()
        for peer in list(self._session.new) + list(self._session.dirty) + list(self._session.deleted):
            if peer is self.instance or type(peer) is not model or id(peer) in seen:
                continue
            seen.add(id(peer))
            yield peer

    def _stored_matches(self, peers: List[Any], criteria: List[Any]) -> Set[tuple]:
        """Identities of persistent peers whose stored row matches `criteria`."""
        identities = [inspect(p).identity for p in peers if inspect(p).identity is not None]
        if not identities:
            return set()
        pk = self._mapper.primary_key
        same_row = or_(*[and_(*[col == v for col, v in zip(pk, ident)]) for ident in identities])
        stmt = select(*pk).where(*criteria, same_row)
        return {tuple(row) for row in self._session.execute(stmt)}

    def _pending_delta(self, filters: Mapping[str, Any], criteria: List[Any]) -> int:
        peers = list(self._peers())
        stored = self._stored_matches(peers, criteria)
        delta = 0
        for peer in peers:
            if peer in self._session.deleted:
                will_match = False
            else:
                will_match = all(_same_value(getattr(peer, name), value) for name, value in filters.items())
            delta += int(will_match) - int(inspect(peer).identity in stored)
        return delta

    def __repr__(self) -> str:
        return f"<SQLAlchemyRecord({self.record_type}, errors={len(self.errors)})>"
