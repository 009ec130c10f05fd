"""
Entity store: one repository interface, an in-memory implementation for
development and tests, and a SQLAlchemy implementation for Postgres.
"""

from __future__ import annotations

import copy
import itertools
import logging
import secrets
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping, Optional, Protocol

from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio_api import records
from portfolio_api.errors import BackendError, ConflictError
from portfolio_api.records import Entity, utcnow
from portfolio_api.tables import ROW_MODELS, Base
from portfolio_api.types import PostStatus, SubscriptionStatus

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Repository(Protocol):
    """CRUD operations every store backend provides for one entity."""

    entity: Entity

    def list(self, **filters: Any) -> list:
        ...

    def get(self, record_id: int) -> Optional[Any]:
        ...

    def find_one(self, **filters: Any) -> Optional[Any]:
        ...

    def create(self, fields: Mapping[str, Any]) -> Any:
        ...

    def update(self, record_id: int, fields: Mapping[str, Any]) -> Optional[Any]:
        ...

    def delete(self, record_id: int) -> bool:
        ...

    def clear(self) -> None:
        ...


def order_key(attr: str):
    """
    Sort key for manually ordered records: ascending by ``attr``, records
    without a value after every ordered one, ties by insertion (id).
    """

    def key(record) -> tuple:
        value = getattr(record, attr)
        return (value is None, value if value is not None else 0, record.id)

    return key


def _with_utc(value: Any) -> Any:
    """SQLite hands back naive datetimes; stored values are always UTC."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _as_aware(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    return _with_utc(value)


def _newest_first(record) -> tuple:
    return (_as_aware(record.publish_date), record.id)


def _conflict(entity: Entity, column: str, value: Any) -> ConflictError:
    return ConflictError(
        f"{entity.label} with {column} '{value}' already exists"
    )


class InMemoryRepository:
    """Dict-backed repository guarded by a lock for threaded request handling."""

    def __init__(self, entity: Entity):
        self.entity = entity
        self._records: dict[int, Any] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def _matches(self, record, filters: Mapping[str, Any]) -> bool:
        return all(getattr(record, key) == value for key, value in filters.items())

    def _check_unique(self, fields: Mapping[str, Any], exclude_id: int | None) -> None:
        for column in self.entity.unique:
            value = fields.get(column)
            if value is None:
                continue
            for record in self._records.values():
                if record.id != exclude_id and getattr(record, column) == value:
                    raise _conflict(self.entity, column, value)

    def list(self, **filters: Any) -> list:
        with self._lock:
            return [
                copy.deepcopy(record)
                for record in self._records.values()
                if self._matches(record, filters)
            ]

    def get(self, record_id: int) -> Optional[Any]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record else None

    def find_one(self, **filters: Any) -> Optional[Any]:
        with self._lock:
            for record in self._records.values():
                if self._matches(record, filters):
                    return copy.deepcopy(record)
            return None

    def create(self, fields: Mapping[str, Any]) -> Any:
        with self._lock:
            self._check_unique(fields, exclude_id=None)
            now = utcnow()
            record = self.entity.record_cls(
                id=next(self._ids),
                **copy.deepcopy(dict(fields)),
                created_at=now,
                updated_at=now,
            )
            self._records[record.id] = record
            return copy.deepcopy(record)

    def update(self, record_id: int, fields: Mapping[str, Any]) -> Optional[Any]:
        with self._lock:
            existing = self._records.get(record_id)
            if not existing:
                return None
            self._check_unique(fields, exclude_id=record_id)
            updated = replace(
                existing, **copy.deepcopy(dict(fields)), updated_at=utcnow()
            )
            self._records[record_id] = updated
            return copy.deepcopy(updated)

    def delete(self, record_id: int) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._ids = itertools.count(1)


class SqlRepository:
    """SQLAlchemy-backed repository for one table."""

    def __init__(self, entity: Entity, session_factory: sessionmaker):
        self.entity = entity
        self.row_cls = ROW_MODELS[entity.name]
        self.Session = session_factory
        self._field_names = entity.field_names()

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except IntegrityError as exc:
            logger.warning(
                "Constraint violation while %s %s: %s",
                action,
                self.entity.name,
                exc.orig,
            )
            raise ConflictError(
                f"{self.entity.label} violates a uniqueness constraint"
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Error %s %s", action, self.entity.name)
            raise BackendError(f"Error {action} {self.entity.name}") from exc

    def _to_record(self, row) -> Any:
        return self.entity.record_cls(
            **{name: _with_utc(getattr(row, name)) for name in self._field_names}
        )

    def _check_unique(
        self, session: Session, fields: Mapping[str, Any], exclude_id: int | None
    ) -> None:
        for column in self.entity.unique:
            value = fields.get(column)
            if value is None:
                continue
            stmt = select(self.row_cls.id).where(
                getattr(self.row_cls, column) == value
            )
            if exclude_id is not None:
                stmt = stmt.where(self.row_cls.id != exclude_id)
            if session.execute(stmt.limit(1)).first():
                raise _conflict(self.entity, column, value)

    def list(self, **filters: Any) -> list:
        with self._session("listing") as session:
            stmt = select(self.row_cls).filter_by(**filters).order_by(self.row_cls.id)
            return [self._to_record(row) for row in session.scalars(stmt)]

    def get(self, record_id: int) -> Optional[Any]:
        with self._session("reading") as session:
            row = session.get(self.row_cls, record_id)
            return self._to_record(row) if row else None

    def find_one(self, **filters: Any) -> Optional[Any]:
        with self._session("reading") as session:
            stmt = (
                select(self.row_cls)
                .filter_by(**filters)
                .order_by(self.row_cls.id)
                .limit(1)
            )
            row = session.scalars(stmt).first()
            return self._to_record(row) if row else None

    def create(self, fields: Mapping[str, Any]) -> Any:
        now = utcnow()
        # Build the record first so dataclass defaults apply to omitted fields.
        template = self.entity.record_cls(
            id=0, **dict(fields), created_at=now, updated_at=now
        )
        values = {
            name: getattr(template, name)
            for name in self._field_names
            if name != "id"
        }
        with self._session("creating") as session:
            self._check_unique(session, values, exclude_id=None)
            row = self.row_cls(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def update(self, record_id: int, fields: Mapping[str, Any]) -> Optional[Any]:
        with self._session("updating") as session:
            row = session.get(self.row_cls, record_id)
            if not row:
                return None
            self._check_unique(session, fields, exclude_id=record_id)
            for name, value in fields.items():
                if name not in self._field_names or name == "id":
                    raise TypeError(f"Unknown field for {self.entity.name}: {name}")
                setattr(row, name, value)
            row.updated_at = utcnow()
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete(self, record_id: int) -> bool:
        with self._session("deleting") as session:
            row = session.get(self.row_cls, record_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def clear(self) -> None:
        with self._session("clearing") as session:
            session.execute(delete(self.row_cls))
            session.commit()


class DbClient:
    """
    Store facade shared by every backend. Holds one repository per entity and
    implements the type-specific listers on top of them, so ordering and
    filtering behave identically whatever the backend.
    """

    def __init__(self, repositories: Mapping[str, Repository]):
        self.users = repositories[records.USERS.name]
        self.sections = repositories[records.SECTIONS.name]
        self.projects = repositories[records.PROJECTS.name]
        self.experiences = repositories[records.EXPERIENCES.name]
        self.certifications = repositories[records.CERTIFICATIONS.name]
        self.blog_categories = repositories[records.BLOG_CATEGORIES.name]
        self.blog_posts = repositories[records.BLOG_POSTS.name]
        self.blog_subscriptions = repositories[records.BLOG_SUBSCRIPTIONS.name]
        self.case_studies = repositories[records.CASE_STUDIES.name]
        self.testimonials = repositories[records.TESTIMONIALS.name]
        self._repositories = dict(repositories)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        for repo in self._repositories.values():
            repo.clear()

    # Users

    def get_user_by_username(self, username: str) -> Optional[records.User]:
        return self.users.find_one(username=username)

    # Sections

    def list_sections(self, section_type: str | None = None) -> list[records.Section]:
        filters = {"type": section_type} if section_type else {}
        return sorted(self.sections.list(**filters), key=order_key("display_order"))

    # Projects

    def list_projects(self, category: str | None = None) -> list[records.Project]:
        filters = {"category": category} if category else {}
        return self.projects.list(**filters)

    def featured_projects(self) -> list[records.Project]:
        return sorted(
            self.projects.list(featured=True), key=order_key("featured_order")
        )

    # Experiences

    def list_experiences(self) -> list[records.Experience]:
        return sorted(self.experiences.list(), key=order_key("order"))

    def create_experience(self, fields: Mapping[str, Any]) -> records.Experience:
        values = dict(fields)
        if values.get("order") is None:
            orders = [e.order for e in self.experiences.list() if e.order is not None]
            values["order"] = max(orders, default=0) + 1
        return self.experiences.create(values)

    # Certifications

    def list_certifications(self) -> list[records.Certification]:
        return self.certifications.list()

    def featured_certifications(self) -> list[records.Certification]:
        return self.certifications.list(featured=True)

    # Blog

    def get_blog_category_by_slug(self, slug: str) -> Optional[records.BlogCategory]:
        return self.blog_categories.find_one(slug=slug)

    def list_blog_posts(self, status: str | None = None) -> list[records.BlogPost]:
        filters = {"status": status} if status else {}
        return sorted(self.blog_posts.list(**filters), key=_newest_first, reverse=True)

    def published_blog_posts(self) -> list[records.BlogPost]:
        return self.list_blog_posts(status=PostStatus.PUBLISHED.value)

    def get_blog_post_by_slug(self, slug: str) -> Optional[records.BlogPost]:
        return self.blog_posts.find_one(slug=slug)

    def blog_posts_by_category(self, category_id: int) -> list[records.BlogPost]:
        return [
            post
            for post in self.published_blog_posts()
            if post.category_id == category_id
        ]

    def blog_posts_by_tag(self, tag: str) -> list[records.BlogPost]:
        return [post for post in self.published_blog_posts() if tag in (post.tags or [])]

    def create_blog_post(self, fields: Mapping[str, Any]) -> records.BlogPost:
        values = dict(fields)
        if values.get("publish_date") is None:
            values["publish_date"] = utcnow()
        if values.get("status") is None:
            values["status"] = PostStatus.DRAFT.value
        return self.blog_posts.create(values)

    # Subscriptions

    def get_subscription_by_email(self, email: str) -> Optional[records.BlogSubscription]:
        return self.blog_subscriptions.find_one(email=email)

    def active_subscriptions(self) -> list[records.BlogSubscription]:
        return self.blog_subscriptions.list(status=SubscriptionStatus.ACTIVE.value)

    def request_subscription(
        self, email: str, name: str | None = None
    ) -> tuple[records.BlogSubscription, bool]:
        """
        Create or refresh a pending subscription.

        Returns the subscription and whether it was newly created. Active
        subscriptions are returned untouched.
        """
        existing = self.get_subscription_by_email(email)
        if existing and existing.status == SubscriptionStatus.ACTIVE.value:
            return existing, False
        fields = {
            "status": SubscriptionStatus.PENDING.value,
            "confirmation_token": secrets.token_urlsafe(32),
        }
        if name is not None:
            fields["name"] = name
        if existing:
            return self.blog_subscriptions.update(existing.id, fields), False
        return self.blog_subscriptions.create({"email": email, **fields}), True

    def confirm_subscription(self, token: str) -> Optional[records.BlogSubscription]:
        subscription = self.blog_subscriptions.find_one(confirmation_token=token)
        if not subscription:
            return None
        return self.blog_subscriptions.update(
            subscription.id,
            {
                "status": SubscriptionStatus.ACTIVE.value,
                "confirmation_token": None,
                "confirmed_at": utcnow(),
            },
        )

    def unsubscribe(self, email: str) -> bool:
        subscription = self.get_subscription_by_email(email)
        if not subscription:
            return False
        self.blog_subscriptions.update(
            subscription.id,
            {
                "status": SubscriptionStatus.UNSUBSCRIBED.value,
                "confirmation_token": None,
            },
        )
        return True

    # Case studies

    def get_case_study_for_post(self, blog_post_id: int) -> Optional[records.CaseStudyDetail]:
        return self.case_studies.find_one(blog_post_id=blog_post_id)

    def list_case_studies(
        self, project_type: str | None = None
    ) -> list[records.CaseStudyDetail]:
        filters = {"project_type": project_type} if project_type else {}
        return self.case_studies.list(**filters)

    # Testimonials

    def approved_testimonials(self) -> list[records.Testimonial]:
        return self.testimonials.list(approved=True)


class InMemoryDbClient(DbClient):
    """Simple in-memory database for development and tests."""

    def __init__(self):
        super().__init__(
            {entity.name: InMemoryRepository(entity) for entity in records.ENTITIES}
        )


def _build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            # One shared connection, otherwise each thread sees an empty database.
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, pool_recycle=1800)


class PostgresDbClient(DbClient):
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres
    or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = _build_engine(database_url)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False
        )
        Base.metadata.create_all(self.engine)
        super().__init__(
            {
                entity.name: SqlRepository(entity, self.Session)
                for entity in records.ENTITIES
            }
        )
