"""
Admin HTTP routes. Every route here sits behind the session gate.
"""

import logging
from dataclasses import asdict
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, Query

from portfolio_api.auth import require_admin
from portfolio_api.db import DbClient
from portfolio_api.dependencies import get_db_client, get_notifier
from portfolio_api.errors import NotFoundError
from portfolio_api.notifier import AnnouncedPost, SocialMediaNotifier
from portfolio_api.records import BlogPost
from portfolio_api.schemas import (
    BlogCategoryCreate,
    BlogCategoryOut,
    BlogCategoryUpdate,
    BlogPostCreate,
    BlogPostUpdate,
    BlogPostWriteOut,
    BlogPostOut,
    CaseStudyCreate,
    CaseStudyOut,
    CaseStudyUpdate,
    CertificationCreate,
    CertificationOut,
    CertificationUpdate,
    ExperienceCreate,
    ExperienceOut,
    ExperienceUpdate,
    ErrorResponse,
    MessageResponse,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    SectionCreate,
    SectionOut,
    SectionUpdate,
    SocialMediaConfigOut,
    SocialMediaConfigUpdate,
    SocialMediaResult,
    SubscriptionOut,
    TestimonialCreate,
    TestimonialOut,
    TestimonialUpdate,
)
from portfolio_api.sessions import SessionRecord
from portfolio_api.types import PostStatus

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def _register_crud(
    path: str,
    repo_name: str,
    label: str,
    out_model: type,
    create_model: Optional[type] = None,
    update_model: Optional[type] = None,
    create: Optional[Callable[[DbClient, dict], Any]] = None,
    update: Optional[Callable[[DbClient, int, dict], Any]] = None,
) -> None:
    """
    Register ``GET/PUT/DELETE {path}/{id}`` and ``POST {path}`` for one
    collection. List routes are declared per collection since their filters
    differ.
    """

    def _get_or_404(db: DbClient, record_id: int):
        record = getattr(db, repo_name).get(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    @router.get(f"{path}/{{record_id}}", response_model=out_model, name=f"get_{repo_name}")
    def get_record(record_id: int, db: DbClient = Depends(get_db_client)):
        return _get_or_404(db, record_id)

    if create_model is not None:

        @router.post(path, response_model=out_model, status_code=201, name=f"create_{repo_name}")
        def create_record(payload: create_model, db: DbClient = Depends(get_db_client)):
            fields = payload.model_dump()
            if create is not None:
                record = create(db, fields)
            else:
                record = getattr(db, repo_name).create(fields)
            logger.info("Created %s %s", label.lower(), record.id)
            return record

    if update_model is not None:

        @router.put(f"{path}/{{record_id}}", response_model=out_model, name=f"update_{repo_name}")
        def update_record(
            record_id: int,
            payload: update_model,
            db: DbClient = Depends(get_db_client),
        ):
            changes = payload.changes()
            if update is not None:
                record = update(db, record_id, changes)
            else:
                record = getattr(db, repo_name).update(record_id, changes)
            if record is None:
                raise NotFoundError(f"{label} not found")
            return record

    @router.delete(f"{path}/{{record_id}}", response_model=MessageResponse, name=f"delete_{repo_name}")
    def delete_record(record_id: int, db: DbClient = Depends(get_db_client)):
        if not getattr(db, repo_name).delete(record_id):
            raise NotFoundError(f"{label} not found")
        logger.info("Deleted %s %s", label.lower(), record_id)
        return MessageResponse(success=True, message=f"{label} deleted successfully")


# ---------- Sections ----------


@router.get("/sections", response_model=list[SectionOut])
def list_sections(
    section_type: Optional[str] = Query(default=None, alias="type"),
    db: DbClient = Depends(get_db_client),
):
    return db.list_sections(section_type)


_register_crud("/sections", "sections", "Section", SectionOut, SectionCreate, SectionUpdate)


# ---------- Projects ----------


@router.get("/projects", response_model=list[ProjectOut])
def list_projects(category: Optional[str] = None, db: DbClient = Depends(get_db_client)):
    return db.list_projects(category)


_register_crud("/projects", "projects", "Project", ProjectOut, ProjectCreate, ProjectUpdate)


# ---------- Experiences ----------


@router.get("/experiences", response_model=list[ExperienceOut])
def list_experiences(db: DbClient = Depends(get_db_client)):
    return db.list_experiences()


_register_crud(
    "/experiences",
    "experiences",
    "Experience",
    ExperienceOut,
    ExperienceCreate,
    ExperienceUpdate,
    create=lambda db, fields: db.create_experience(fields),
)


# ---------- Certifications ----------


@router.get("/certifications", response_model=list[CertificationOut])
def list_certifications(db: DbClient = Depends(get_db_client)):
    return db.list_certifications()


_register_crud(
    "/certifications",
    "certifications",
    "Certification",
    CertificationOut,
    CertificationCreate,
    CertificationUpdate,
)


# ---------- Blog ----------


def _announce(notifier: SocialMediaNotifier, post: BlogPost) -> dict:
    try:
        return notifier.publish(
            AnnouncedPost(
                title=post.title,
                excerpt=post.excerpt,
                slug=post.slug,
                tags=list(post.tags or []),
            )
        )
    except Exception as exc:
        logger.exception("Social media notification failed for %s", post.slug)
        return {"success": False, "message": f"Social media posting failed: {exc}"}


def _with_social(post: BlogPost, social_media: Optional[dict]) -> BlogPostWriteOut:
    return BlogPostWriteOut.model_validate({**asdict(post), "social_media": social_media})


@router.get("/blog/posts", response_model=list[BlogPostOut])
def list_blog_posts(
    status: Optional[PostStatus] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list_blog_posts(status.value if status else None)


@router.post("/blog/posts", response_model=BlogPostWriteOut, status_code=201)
def create_blog_post(
    payload: BlogPostCreate,
    session: SessionRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
    notifier: SocialMediaNotifier = Depends(get_notifier),
):
    """Create a post; publishing it straight away announces it on social media."""
    fields = payload.model_dump()
    if fields.get("user_id") is None:
        fields["user_id"] = session.user_id
    post = db.create_blog_post(fields)
    logger.info("Created blog post %s (%s)", post.id, post.status)

    social_media = None
    if post.status == PostStatus.PUBLISHED.value:
        social_media = _announce(notifier, post)
    return _with_social(post, social_media)


@router.put("/blog/posts/{record_id}", response_model=BlogPostWriteOut)
def update_blog_post(
    record_id: int,
    payload: BlogPostUpdate,
    db: DbClient = Depends(get_db_client),
    notifier: SocialMediaNotifier = Depends(get_notifier),
):
    """Update a post; the draft to published transition announces it."""
    existing = db.blog_posts.get(record_id)
    if existing is None:
        raise NotFoundError("Blog post not found")
    post = db.blog_posts.update(record_id, payload.changes())
    if post is None:
        raise NotFoundError("Blog post not found")

    social_media = None
    published = PostStatus.PUBLISHED.value
    if post.status == published and existing.status != published:
        social_media = _announce(notifier, post)
    return _with_social(post, social_media)


_register_crud("/blog/posts", "blog_posts", "Blog post", BlogPostOut)


@router.get("/blog/categories", response_model=list[BlogCategoryOut])
def list_blog_categories(db: DbClient = Depends(get_db_client)):
    return db.blog_categories.list()


_register_crud(
    "/blog/categories",
    "blog_categories",
    "Blog category",
    BlogCategoryOut,
    BlogCategoryCreate,
    BlogCategoryUpdate,
)


@router.get("/blog/subscriptions", response_model=list[SubscriptionOut])
def list_subscriptions(db: DbClient = Depends(get_db_client)):
    return db.blog_subscriptions.list()


@router.delete("/blog/subscriptions/{record_id}", response_model=MessageResponse)
def delete_subscription(record_id: int, db: DbClient = Depends(get_db_client)):
    if not db.blog_subscriptions.delete(record_id):
        raise NotFoundError("Subscription not found")
    return MessageResponse(success=True, message="Subscription deleted successfully")


# ---------- Case studies ----------


def _create_case_study(db: DbClient, fields: dict):
    if db.blog_posts.get(fields["blog_post_id"]) is None:
        raise NotFoundError("Blog post not found")
    return db.case_studies.create(fields)


def _update_case_study(db: DbClient, record_id: int, changes: dict):
    if "blog_post_id" in changes and db.blog_posts.get(changes["blog_post_id"]) is None:
        raise NotFoundError("Blog post not found")
    return db.case_studies.update(record_id, changes)


@router.get("/case-studies", response_model=list[CaseStudyOut])
def list_case_studies(
    project_type: Optional[str] = Query(default=None, alias="projectType"),
    db: DbClient = Depends(get_db_client),
):
    return db.list_case_studies(project_type)


_register_crud(
    "/case-studies",
    "case_studies",
    "Case study",
    CaseStudyOut,
    CaseStudyCreate,
    CaseStudyUpdate,
    create=_create_case_study,
    update=_update_case_study,
)


# ---------- Testimonials ----------


@router.get("/testimonials", response_model=list[TestimonialOut])
def list_testimonials(db: DbClient = Depends(get_db_client)):
    return db.testimonials.list()


_register_crud(
    "/testimonials",
    "testimonials",
    "Testimonial",
    TestimonialOut,
    TestimonialCreate,
    TestimonialUpdate,
)


# ---------- Social media ----------


@router.get("/social-media/config", response_model=SocialMediaConfigOut)
def get_social_media_config(notifier: SocialMediaNotifier = Depends(get_notifier)):
    return SocialMediaConfigOut.from_config(notifier.get_config())


@router.put("/social-media/config", response_model=SocialMediaConfigOut)
def update_social_media_config(
    payload: SocialMediaConfigUpdate,
    notifier: SocialMediaNotifier = Depends(get_notifier),
):
    config = notifier.update_config(payload.changes())
    logger.info("Social media config updated")
    return SocialMediaConfigOut.from_config(config)


@router.post("/social-media/test", response_model=SocialMediaResult)
def send_social_media_test(notifier: SocialMediaNotifier = Depends(get_notifier)):
    return notifier.send_test()
