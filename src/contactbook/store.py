"""SQLite persistence for contacts.

`ContactStore` is the only code that touches the `contacts` table. Every read
returns `schemas.Contact` records with `favorite` as a bool; every write stores
`favorite` as 0/1. Each operation is a single statement in its own session.
"""
import logging
import re
from contextlib import contextmanager
from typing import List, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from .db import Base, make_engine, make_session_factory
from .models import ContactRow
from .schemas import Contact, ContactUpdate

logger = logging.getLogger(__name__)

_SQLITE_INT_MIN = -(2 ** 63)
_SQLITE_INT_MAX = 2 ** 63 - 1
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

ContactId = Union[str, int]


def favorite_to_storage(value: bool) -> int:
    return 1 if value else 0


def favorite_from_storage(value: int) -> bool:
    return bool(value)


def parse_contact_id(value: ContactId) -> Optional[int]:
    """Parse the external id form; returns None if it can never match a row."""
    if isinstance(value, str):
        # only the plain decimal form matches the INTEGER key in SQLite
        if not _ID_PATTERN.fullmatch(value.strip()):
            return None
        key = int(value.strip())
    elif isinstance(value, int) and not isinstance(value, bool):
        key = value
    else:
        return None
    if not _SQLITE_INT_MIN <= key <= _SQLITE_INT_MAX:
        return None
    return key


def contact_from_row(row: ContactRow) -> Contact:
    return Contact(
        id=row.id,
        first=row.first,
        last=row.last,
        twitter=row.twitter,
        notes=row.notes,
        favorite=favorite_from_storage(row.favorite),
        avatar=row.avatar,
    )


class ContactStore:
    def __init__(self, db_path: str, echo: bool = False):
        self.db_path = db_path
        self.engine = make_engine(db_path, echo=echo)
        self._session = make_session_factory(self.engine)
        try:
            with self._reporting("create schema"):
                Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError:
            self.engine.dispose()
            raise
        logger.info("Contact store opened at %s", db_path)

    def close(self):
        self.engine.dispose()
        logger.info("Contact store closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @contextmanager
    def _reporting(self, action: str):
        # log storage faults where they happen, then let the caller see them
        try:
            yield
        except SQLAlchemyError:
            logger.exception("Database error during %s", action)
            raise

    def create_empty(self) -> Contact:
        row = ContactRow(
            first="New",
            last="Contact",
            twitter="",
            notes="",
            favorite=favorite_to_storage(False),
            avatar="",
        )
        with self._reporting("create"), self._session() as session:
            session.add(row)
            session.commit()
            contact = contact_from_row(row)
        logger.info("Created contact %s", contact.id)
        return contact

    def get(self, contact_id: ContactId) -> Optional[Contact]:
        key = parse_contact_id(contact_id)
        if key is None:
            return None
        with self._reporting("get"), self._session() as session:
            row = session.get(ContactRow, key)
            return contact_from_row(row) if row is not None else None

    def list(self) -> List[Contact]:
        with self._reporting("list"), self._session() as session:
            rows = session.query(ContactRow).order_by(ContactRow.id).all()
            contacts = [contact_from_row(r) for r in rows]
        logger.debug("Listed %d contacts", len(contacts))
        return contacts

    def update(self, contact_id: ContactId, changes: Union[ContactUpdate, Mapping]) -> int:
        """Write only the fields defined in `changes`; returns rows affected.

        The updated record is not returned, callers reload it with `get`.
        """
        if not isinstance(changes, ContactUpdate):
            changes = ContactUpdate.model_validate(changes)
        key = parse_contact_id(contact_id)
        if key is None:
            return 0
        values = changes.changes()
        if "favorite" in values:
            values["favorite"] = favorite_to_storage(values["favorite"])
        with self._reporting("update"), self._session() as session:
            query = session.query(ContactRow).filter(ContactRow.id == key)
            if not values:
                return query.count()
            count = query.update(values, synchronize_session=False)
            session.commit()
        logger.info("Updated contact %s fields=%s rows=%d", key, sorted(values), count)
        return count

    def delete(self, contact_id: ContactId) -> int:
        key = parse_contact_id(contact_id)
        if key is None:
            return 0
        with self._reporting("delete"), self._session() as session:
            count = session.query(ContactRow).filter(ContactRow.id == key).delete(
                synchronize_session=False
            )
            session.commit()
        logger.info("Deleted contact %s rows=%d", key, count)
        return count
