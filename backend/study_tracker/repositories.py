"""Repository classes encapsulating owner-scoped store operations.

Each repository is bound to one session and one owner. The owner
predicate is added by the base classes to every statement they build,
so no concrete repository can query outside its owner. Repositories
return plain JSON-ready dictionaries with the store identity under
`_id`, and raise `errors.StoreError` subclasses on failure.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple, Type

import pydantic
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from . import errors, models, schemas

logger = logging.getLogger("study_tracker.store")

# Keys only the server may set: store identity, version marker, owner and timestamps.
SERVER_FIELDS = ("_id", "__v", "doc_id", "userId", "createdAt", "updatedAt")


def to_document(row: models.OwnedDocument) -> Dict[str, Any]:
    """Dump a row to a dictionary with `doc_id` exposed as `_id`."""
    data = row.model_dump()
    return {"_id": data.pop("doc_id"), **data}


def parse_id(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = None
    if value is None or not schemas.INT64_MIN <= value <= schemas.INT64_MAX:
        raise errors.StoreError(f'Cast to id failed for value "{raw}"')
    return value


def client_fields(payload: Any, drop: Tuple[str, ...] = ()) -> Any:
    """Return `payload` without server-owned keys and the extra `drop` keys.

    A missing body counts as an empty document. Anything that is not a
    mapping is returned unchanged so validation can report it.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        return payload
    blocked = set(SERVER_FIELDS) | set(drop)
    return {k: v for k, v in payload.items() if k not in blocked}


def validate(schema: Type[pydantic.BaseModel], payload: Any, entity: str) -> pydantic.BaseModel:
    """Validate `payload` against `schema` or raise `errors.ValidationError`."""
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as exc:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in exc.errors()
        )
        raise errors.ValidationError(f"{entity} validation failed: {reasons}") from exc


def _supplied(data: pydantic.BaseModel, keys) -> Dict[str, Any]:
    dumped = data.model_dump(mode="json")
    return {k: dumped[k] for k in keys if k in dumped}


@contextmanager
def store_errors(session: Session):
    """Roll back and re-raise any driver or SQLAlchemy failure as `errors.StoreError`.

    The sqlite3 driver raises a bare `OverflowError` for integers beyond
    64 bits instead of a DBAPI error.
    """
    try:
        yield
    except (SQLAlchemyError, OverflowError) as exc:
        session.rollback()
        raise errors.StoreError(str(getattr(exc, "orig", None) or exc)) from exc


def _log(event: str, **fields) -> None:
    logger.info("%s %s", event, json.dumps(fields, ensure_ascii=True, default=str))


class OwnedRepository:
    """List, create and delete the documents of one owner."""
    model: Type[models.OwnedDocument]
    create_schema: Type[schemas.StoreSchema]
    entity: str

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id

    def _scoped(self, statement):
        """Restrict `statement` to rows of the bound owner."""
        return statement.where(self.model.userId == self.user_id)

    def _get_owned(self, doc_id: Any) -> Optional[models.OwnedDocument]:
        stmt = self._scoped(select(self.model).where(self.model.doc_id == parse_id(doc_id)))
        return self.session.exec(stmt).first()

    def list_all(self) -> List[Dict[str, Any]]:
        """Return every document of the owner in insertion order."""
        stmt = self._scoped(select(self.model)).order_by(self.model.doc_id)
        with store_errors(self.session):
            rows = self.session.exec(stmt).all()
        return [to_document(r) for r in rows]

    def create(self, payload: Any) -> Dict[str, Any]:
        """Validate and persist a new document owned by the bound owner.

        Any owner, identity or timestamp sent by the client is ignored.
        """
        data = validate(self.create_schema, client_fields(payload), self.entity)
        row = self.model(**data.model_dump(mode="json"), userId=self.user_id)
        with store_errors(self.session):
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        _log("document_created", entity=self.entity, id=row.doc_id, user_id=self.user_id)
        return to_document(row)

    def delete(self, doc_id: Any) -> None:
        """Delete the owner's document `doc_id`; absent ids are a no-op."""
        with store_errors(self.session):
            row = self._get_owned(doc_id)
            if row is None:
                return
            self.session.delete(row)
            self.session.commit()
        _log("document_deleted", entity=self.entity, id=doc_id, user_id=self.user_id)


class UpdatableRepository(OwnedRepository):
    """Adds partial update by id.

    `identity_fields` are stripped from the replacement before merging.
    With `revalidate` the merged document is checked against
    `create_schema`; otherwise only the supplied fields are coerced with
    `update_schema`.
    """
    update_schema: Optional[Type[schemas.StoreSchema]] = None
    identity_fields: Tuple[str, ...] = ("_id", "__v")
    revalidate = False

    def _changes(self, row: models.OwnedDocument, replacement: Any) -> Dict[str, Any]:
        if not self.revalidate:
            data = validate(self.update_schema, replacement, self.entity)
            return _supplied(data, data.model_fields_set)
        if not isinstance(replacement, dict):
            validate(self.create_schema, replacement, self.entity)
        stored = to_document(row)
        current = {k: stored[k] for k in self.create_schema.model_fields if k in stored}
        data = validate(self.create_schema, {**current, **replacement}, self.entity)
        return _supplied(data, replacement.keys())

    def update(self, doc_id: Any, payload: Any) -> Dict[str, Any]:
        """Merge `payload` into the owner's document `doc_id`.

        Raises `errors.NotFoundError` when the owner has no such document.
        """
        replacement = client_fields(payload, drop=self.identity_fields)
        with store_errors(self.session):
            row = self._get_owned(doc_id)
        if row is None:
            raise errors.NotFoundError(f"{self.entity} not found")
        changes = self._changes(row, replacement)
        with store_errors(self.session):
            for key, value in changes.items():
                setattr(row, key, value)
            row.updatedAt = models.utcnow()
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        _log("document_updated", entity=self.entity, id=row.doc_id, user_id=self.user_id, fields=sorted(changes))
        return to_document(row)


class SingletonRepository:
    """Scoped upsert for resources holding one row per owner.

    Both operations rely on the unique `userId` column: creation is an
    insert that ignores a conflicting concurrent insert, and writes are a
    single INSERT .. ON CONFLICT DO UPDATE statement.
    """
    model: Type[models.OwnedDocument]
    schema: Type[schemas.StoreSchema]
    entity: str

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(self.model)
        if dialect == "postgresql":
            return postgresql.insert(self.model)
        raise errors.StoreError(f"scoped upsert is not supported on {dialect}")

    def _fetch(self) -> Optional[models.OwnedDocument]:
        stmt = select(self.model).where(self.model.userId == self.user_id)
        return self.session.exec(stmt).first()

    def get_or_create(self) -> Dict[str, Any]:
        """Return the owner's record, creating an empty one on first read."""
        with store_errors(self.session):
            row = self._fetch()
            if row is None:
                now = models.utcnow()
                stmt = self._insert().values(userId=self.user_id, createdAt=now, updatedAt=now)
                self.session.exec(stmt.on_conflict_do_nothing(index_elements=["userId"]))
                self.session.commit()
                row = self._fetch()
                _log("document_created", entity=self.entity, id=row.doc_id, user_id=self.user_id)
        return to_document(row)

    def upsert(self, payload: Any) -> Dict[str, Any]:
        """Write the supplied fields, creating the record first if absent."""
        data = validate(self.schema, client_fields(payload), self.entity)
        fields = _supplied(data, data.model_fields_set)
        now = models.utcnow()
        stmt = self._insert().values(userId=self.user_id, createdAt=now, updatedAt=now, **fields)
        stmt = stmt.on_conflict_do_update(index_elements=["userId"], set_={**fields, "updatedAt": now})
        with store_errors(self.session):
            self.session.exec(stmt)
            self.session.commit()
            row = self._fetch()
        _log("document_upserted", entity=self.entity, id=row.doc_id, user_id=self.user_id, fields=sorted(fields))
        return to_document(row)


class SubjectRepository(UpdatableRepository):
    model = models.Subject
    create_schema = schemas.SubjectIn
    entity = "Subject"
    # the client-side `id` of a subject is immutable once stored
    identity_fields = ("_id", "__v", "id")
    revalidate = True


class ScheduleRepository(UpdatableRepository):
    model = models.ScheduleEntry
    create_schema = schemas.ScheduleIn
    update_schema = schemas.ScheduleUpdate
    entity = "Schedule"


class GoalRepository(UpdatableRepository):
    model = models.Goal
    create_schema = schemas.GoalIn
    update_schema = schemas.GoalIn
    entity = "Goal"


class GradeRepository(OwnedRepository):
    model = models.Grade
    create_schema = schemas.GradeIn
    entity = "Grade"


class DocumentRepository(OwnedRepository):
    model = models.Document
    create_schema = schemas.DocumentIn
    entity = "Document"


class SettingsRepository(SingletonRepository):
    model = models.UserSettings
    schema = schemas.SettingsIn
    entity = "Settings"


class StatsRepository(SingletonRepository):
    model = models.UserStats
    schema = schemas.StatsIn
    entity = "Stats"
