from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import DeclarativeBase, Session


class Base(DeclarativeBase):
    pass


class AppendOnlyMixin:
    """Rows of these tables may be inserted but never changed or removed."""


@event.listens_for(Session, "before_flush")
def _reject_append_only_mutations(session: Session, flush_context: object, instances: object) -> None:
    for instance in session.dirty:
        if isinstance(instance, AppendOnlyMixin) and session.is_modified(instance):
            raise ValueError(f"{type(instance).__tablename__} is append-only")
    for instance in session.deleted:
        if isinstance(instance, AppendOnlyMixin):
            raise ValueError(f"{type(instance).__tablename__} is append-only")
