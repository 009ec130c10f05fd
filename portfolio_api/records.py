"""
Stored record types for every content entity.

Records are plain dataclasses; both store backends hand them out, and the
response schemas read them with ``from_attributes``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Section:
    id: int
    type: str
    title: str
    content: Any
    subtitle: Optional[str] = None
    display_order: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Project:
    id: int
    title: str
    description: str
    category: str
    technologies: list = field(default_factory=list)
    year: Optional[str] = None
    role: Optional[str] = None
    icon: Optional[str] = None
    github_link: Optional[str] = None
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    challenges: Optional[list] = None
    outcomes: Optional[list] = None
    featured: bool = False
    featured_order: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Experience:
    id: int
    company: str
    role: str
    period: str
    description: list = field(default_factory=list)
    achievements: list = field(default_factory=list)
    methodologies: list = field(default_factory=list)
    order: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Certification:
    id: int
    title: str
    issuer: str
    issue_date: str
    expiry_date: Optional[str] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    description: Optional[str] = None
    skills: list = field(default_factory=list)
    featured: bool = False
    image_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class BlogCategory:
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class BlogPost:
    id: int
    title: str
    slug: str
    excerpt: str
    content: str
    status: str = "draft"
    publish_date: Optional[datetime] = None
    category_id: Optional[int] = None
    featured_image: Optional[str] = None
    tags: list = field(default_factory=list)
    user_id: Optional[int] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class BlogSubscription:
    id: int
    email: str
    status: str = "pending"
    name: Optional[str] = None
    confirmation_token: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class CaseStudyDetail:
    id: int
    blog_post_id: int
    client: str
    project_type: str
    problem: str
    solution: str
    results: str
    role: Optional[str] = None
    duration: Optional[str] = None
    technologies: list = field(default_factory=list)
    challenges: list = field(default_factory=list)
    learnings: list = field(default_factory=list)
    testimonial: Optional[dict] = None
    metrics: list = field(default_factory=list)
    gallery: list = field(default_factory=list)
    video_url: Optional[str] = None
    featured: bool = False
    featured_order: Optional[int] = None
    seo_keywords: list = field(default_factory=list)
    seo_description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Testimonial:
    id: int
    name: str
    content: str
    role: Optional[str] = None
    company: Optional[str] = None
    rating: Optional[int] = None
    approved: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Entity:
    """Describes one collection: its record type and unique columns."""

    name: str
    record_cls: type
    label: str
    unique: tuple[str, ...] = ()

    def field_names(self) -> list[str]:
        return [f.name for f in fields(self.record_cls)]


USERS = Entity("users", User, "User", unique=("username",))
SECTIONS = Entity("sections", Section, "Section")
PROJECTS = Entity("projects", Project, "Project")
EXPERIENCES = Entity("experiences", Experience, "Experience")
CERTIFICATIONS = Entity("certifications", Certification, "Certification")
BLOG_CATEGORIES = Entity("blog_categories", BlogCategory, "Blog category", unique=("slug",))
BLOG_POSTS = Entity("blog_posts", BlogPost, "Blog post", unique=("slug",))
BLOG_SUBSCRIPTIONS = Entity(
    "blog_subscriptions", BlogSubscription, "Subscription", unique=("email",)
)
CASE_STUDIES = Entity(
    "case_study_details", CaseStudyDetail, "Case study", unique=("blog_post_id",)
)
TESTIMONIALS = Entity("testimonials", Testimonial, "Testimonial")

ENTITIES: tuple[Entity, ...] = (
    USERS,
    SECTIONS,
    PROJECTS,
    EXPERIENCES,
    CERTIFICATIONS,
    BLOG_CATEGORIES,
    BLOG_POSTS,
    BLOG_SUBSCRIPTIONS,
    CASE_STUDIES,
    TESTIMONIALS,
)
