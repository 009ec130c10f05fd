"""
Pydantic schemas for the portfolio API.

Wire format is camelCase; snake_case input is accepted too. ``*Create``
models enforce required fields, ``*Update`` models make every field optional
for partial updates, ``*Out`` models render stored records.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from portfolio_api.notifier import NotifierConfig
from portfolio_api.types import PostStatus, SectionType, SubscriptionStatus

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        from_attributes=True,
    )


class PartialModel(ApiModel):
    """
    Base for partial updates. Omitted fields stay untouched; ``null`` is only
    accepted for fields that are nullable on the stored record.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        nulls = sorted(
            name
            for name in self.model_fields_set & self.required_fields
            if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def _split_tags(value: Any) -> Any:
    # The admin form posts tags as a comma separated string.
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


TagList = Annotated[list[str], BeforeValidator(_split_tags)]


# ---------- Envelopes ----------


class MessageResponse(ApiModel):
    success: bool
    message: str


class FieldError(ApiModel):
    field: str
    message: str
    type: str


class ErrorResponse(ApiModel):
    success: Literal[False] = False
    message: str
    errors: Optional[list[FieldError]] = None


# ---------- Auth ----------


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class UserOut(ApiModel):
    id: int
    username: str


class LoginResponse(ApiModel):
    success: bool
    message: str
    user: Optional[UserOut] = None


class SessionResponse(ApiModel):
    is_authenticated: bool
    user: Optional[UserOut] = None


# ---------- Sections ----------


class SectionCreate(ApiModel):
    type: SectionType
    title: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = None
    content: Union[list[str], dict[str, Any]]
    display_order: Optional[int] = None


class SectionUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset({"type", "title", "content"})

    type: Optional[SectionType] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    subtitle: Optional[str] = None
    content: Optional[Union[list[str], dict[str, Any]]] = None
    display_order: Optional[int] = None


class SectionOut(ApiModel):
    id: int
    type: str
    title: str
    subtitle: Optional[str] = None
    content: Any
    display_order: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# ---------- Projects ----------


class ProjectCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=50)
    technologies: list[str] = Field(default_factory=list)
    year: Optional[str] = Field(default=None, max_length=10)
    role: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=50)
    github_link: Optional[str] = Field(default=None, max_length=255)
    external_link: Optional[str] = Field(default=None, max_length=255)
    image_url: Optional[str] = Field(default=None, max_length=512)
    challenges: Optional[list[str]] = None
    outcomes: Optional[list[str]] = None
    featured: bool = False
    featured_order: Optional[int] = None


class ProjectUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "description", "category", "technologies", "featured"}
    )

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    technologies: Optional[list[str]] = None
    year: Optional[str] = Field(default=None, max_length=10)
    role: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=50)
    github_link: Optional[str] = Field(default=None, max_length=255)
    external_link: Optional[str] = Field(default=None, max_length=255)
    image_url: Optional[str] = Field(default=None, max_length=512)
    challenges: Optional[list[str]] = None
    outcomes: Optional[list[str]] = None
    featured: Optional[bool] = None
    featured_order: Optional[int] = None


class ProjectOut(ApiModel):
    id: int
    title: str
    description: str
    category: str
    technologies: list[Any]
    year: Optional[str] = None
    role: Optional[str] = None
    icon: Optional[str] = None
    github_link: Optional[str] = None
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    challenges: Optional[list[Any]] = None
    outcomes: Optional[list[Any]] = None
    featured: bool
    featured_order: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# ---------- Experiences ----------


class ExperienceCreate(ApiModel):
    company: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    period: str = Field(..., min_length=1, max_length=100)
    description: list[str]
    achievements: list[str] = Field(default_factory=list)
    methodologies: list[str] = Field(default_factory=list)
    order: Optional[int] = Field(default=None, ge=0)


class ExperienceUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "company",
            "role",
            "period",
            "description",
            "achievements",
            "methodologies",
            "order",
        }
    )

    company: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[str] = Field(default=None, min_length=1, max_length=255)
    period: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    methodologies: Optional[list[str]] = None
    order: Optional[int] = Field(default=None, ge=0)


class ExperienceOut(ApiModel):
    id: int
    company: str
    role: str
    period: str
    description: list[Any]
    achievements: list[Any]
    methodologies: list[Any]
    order: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# ---------- Certifications ----------


class CertificationCreate(ApiModel):
    title: str = Field(..., min_length=2, max_length=255)
    issuer: str = Field(..., min_length=2, max_length=255)
    issue_date: str = Field(..., min_length=1, max_length=50)
    expiry_date: Optional[str] = Field(default=None, max_length=50)
    credential_id: Optional[str] = Field(default=None, alias="credentialID")
    credential_url: Optional[str] = Field(default=None, alias="credentialURL")
    description: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    featured: bool = False
    image_url: Optional[str] = None


class CertificationUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "issuer", "issue_date", "skills", "featured"}
    )

    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    issuer: Optional[str] = Field(default=None, min_length=2, max_length=255)
    issue_date: Optional[str] = Field(default=None, min_length=1, max_length=50)
    expiry_date: Optional[str] = Field(default=None, max_length=50)
    credential_id: Optional[str] = Field(default=None, alias="credentialID")
    credential_url: Optional[str] = Field(default=None, alias="credentialURL")
    description: Optional[str] = None
    skills: Optional[list[str]] = None
    featured: Optional[bool] = None
    image_url: Optional[str] = None


class CertificationOut(ApiModel):
    id: int
    title: str
    issuer: str
    issue_date: str
    expiry_date: Optional[str] = None
    credential_id: Optional[str] = Field(default=None, alias="credentialID")
    credential_url: Optional[str] = Field(default=None, alias="credentialURL")
    description: Optional[str] = None
    skills: list[Any]
    featured: bool
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------- Blog categories ----------


class BlogCategoryCreate(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = None


class BlogCategoryUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name", "slug"})

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    slug: Optional[str] = Field(
        default=None, min_length=2, max_length=100, pattern=SLUG_PATTERN
    )
    description: Optional[str] = None


class BlogCategoryOut(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------- Blog posts ----------


class BlogPostCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category_id: Optional[int] = Field(default=None, gt=0)
    featured_image: Optional[str] = None
    tags: TagList = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    publish_date: Optional[datetime] = None
    user_id: Optional[int] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = None


class BlogPostUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "slug", "excerpt", "content", "tags", "status"}
    )

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(
        default=None, min_length=1, max_length=255, pattern=SLUG_PATTERN
    )
    excerpt: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[int] = Field(default=None, gt=0)
    featured_image: Optional[str] = None
    tags: Optional[TagList] = None
    status: Optional[PostStatus] = None
    publish_date: Optional[datetime] = None
    user_id: Optional[int] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = None


class BlogPostOut(ApiModel):
    id: int
    title: str
    slug: str
    excerpt: str
    content: str
    category_id: Optional[int] = None
    featured_image: Optional[str] = None
    tags: list[str]
    status: str
    publish_date: Optional[datetime] = None
    user_id: Optional[int] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PlatformResultOut(ApiModel):
    success: bool
    message: str


class SocialMediaResult(ApiModel):
    success: bool
    message: str
    platforms: dict[str, PlatformResultOut] = Field(default_factory=dict)


class BlogPostWriteOut(BlogPostOut):
    """Blog post plus the outcome of announcing it, when it was published."""

    social_media: Optional[SocialMediaResult] = None


# ---------- Subscriptions ----------


class SubscribeRequest(ApiModel):
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=255)


class SubscriptionOut(ApiModel):
    id: int
    email: str
    name: Optional[str] = None
    status: SubscriptionStatus
    confirmed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SubscriptionResponse(ApiModel):
    success: bool
    message: str
    subscription: Optional[SubscriptionOut] = None


# ---------- Case studies ----------


class CaseStudyTestimonial(ApiModel):
    author: str
    role: str
    company: str
    content: str


class CaseStudyMetric(ApiModel):
    name: str
    value: str
    description: Optional[str] = None


class GalleryImage(ApiModel):
    url: str
    alt: str
    caption: Optional[str] = None


class CaseStudyCreate(ApiModel):
    blog_post_id: int = Field(..., gt=0)
    client: str = Field(..., min_length=1, max_length=255)
    project_type: str = Field(..., min_length=1, max_length=100)
    problem: str = Field(..., min_length=1)
    solution: str = Field(..., min_length=1)
    results: str = Field(..., min_length=1)
    role: Optional[str] = None
    duration: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    learnings: list[str] = Field(default_factory=list)
    testimonial: Optional[CaseStudyTestimonial] = None
    metrics: list[CaseStudyMetric] = Field(default_factory=list)
    gallery: list[GalleryImage] = Field(default_factory=list)
    video_url: Optional[str] = None
    featured: bool = False
    featured_order: Optional[int] = None
    seo_keywords: list[str] = Field(default_factory=list)
    seo_description: Optional[str] = None


class CaseStudyUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "blog_post_id",
            "client",
            "project_type",
            "problem",
            "solution",
            "results",
            "technologies",
            "challenges",
            "learnings",
            "metrics",
            "gallery",
            "featured",
            "seo_keywords",
        }
    )

    blog_post_id: Optional[int] = Field(default=None, gt=0)
    client: Optional[str] = Field(default=None, min_length=1, max_length=255)
    project_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    problem: Optional[str] = Field(default=None, min_length=1)
    solution: Optional[str] = Field(default=None, min_length=1)
    results: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = None
    duration: Optional[str] = None
    technologies: Optional[list[str]] = None
    challenges: Optional[list[str]] = None
    learnings: Optional[list[str]] = None
    testimonial: Optional[CaseStudyTestimonial] = None
    metrics: Optional[list[CaseStudyMetric]] = None
    gallery: Optional[list[GalleryImage]] = None
    video_url: Optional[str] = None
    featured: Optional[bool] = None
    featured_order: Optional[int] = None
    seo_keywords: Optional[list[str]] = None
    seo_description: Optional[str] = None


class CaseStudyOut(ApiModel):
    id: int
    blog_post_id: int
    client: str
    project_type: str
    problem: str
    solution: str
    results: str
    role: Optional[str] = None
    duration: Optional[str] = None
    technologies: list[str]
    challenges: list[str]
    learnings: list[str]
    testimonial: Optional[CaseStudyTestimonial] = None
    metrics: list[CaseStudyMetric]
    gallery: list[GalleryImage]
    video_url: Optional[str] = None
    featured: bool
    featured_order: Optional[int] = None
    seo_keywords: list[str]
    seo_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------- Testimonials ----------


class TestimonialSubmit(ApiModel):
    name: str = Field(..., min_length=2, max_length=255)
    content: str = Field(..., min_length=10)
    role: Optional[str] = Field(default=None, max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class TestimonialCreate(TestimonialSubmit):
    approved: bool = False


class TestimonialUpdate(PartialModel):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name", "content", "approved"})

    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    content: Optional[str] = Field(default=None, min_length=10)
    role: Optional[str] = Field(default=None, max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    approved: Optional[bool] = None


class TestimonialOut(ApiModel):
    id: int
    name: str
    content: str
    role: Optional[str] = None
    company: Optional[str] = None
    rating: Optional[int] = None
    approved: bool
    created_at: datetime
    updated_at: datetime


# ---------- Contact ----------


class ContactRequest(ApiModel):
    name: str = Field(..., min_length=2, description="Name must be at least 2 characters.")
    email: EmailStr
    subject: str = Field(..., min_length=3)
    message: str = Field(..., min_length=10)


# ---------- Social media ----------


class TwitterConfigUpdate(ApiModel):
    enabled: Optional[bool] = None
    access_token: Optional[str] = None


class BlueskyConfigUpdate(ApiModel):
    enabled: Optional[bool] = None
    identifier: Optional[str] = None
    password: Optional[str] = None
    service_url: Optional[str] = None


class SocialMediaConfigUpdate(ApiModel):
    twitter: Optional[TwitterConfigUpdate] = None
    bluesky: Optional[BlueskyConfigUpdate] = None
    post_format: Optional[str] = Field(default=None, min_length=1)
    include_tags: Optional[bool] = None
    base_url: Optional[str] = Field(default=None, min_length=1)

    def changes(self) -> dict[str, Any]:
        # Unset and null values both mean "keep the current setting".
        return self.model_dump(exclude_unset=True, exclude_none=True)


class TwitterConfigOut(ApiModel):
    enabled: bool
    configured: bool


class BlueskyConfigOut(ApiModel):
    enabled: bool
    identifier: Optional[str] = None
    service_url: str
    configured: bool


class SocialMediaConfigOut(ApiModel):
    """Notifier settings with credentials reduced to a ``configured`` flag."""

    twitter: TwitterConfigOut
    bluesky: BlueskyConfigOut
    post_format: str
    include_tags: bool
    base_url: str

    @classmethod
    def from_config(cls, config: NotifierConfig) -> "SocialMediaConfigOut":
        return cls(
            twitter=TwitterConfigOut(
                enabled=config.twitter.enabled,
                configured=bool(config.twitter.access_token),
            ),
            bluesky=BlueskyConfigOut(
                enabled=config.bluesky.enabled,
                identifier=config.bluesky.identifier,
                service_url=config.bluesky.service_url,
                configured=bool(config.bluesky.identifier and config.bluesky.password),
            ),
            post_format=config.post_format,
            include_tags=config.include_tags,
            base_url=config.base_url,
        )
