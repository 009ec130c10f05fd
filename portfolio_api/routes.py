"""
Public HTTP routes: read-only content, submissions and the login endpoints.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from portfolio_api.auth import (
    authenticate_user,
    client_address,
    get_current_session,
)
from portfolio_api.config import Settings, get_settings
from portfolio_api.db import DbClient
from portfolio_api.dependencies import (
    get_db_client,
    get_login_limiter,
    get_session_store,
    get_submission_limiter,
)
from portfolio_api.errors import AuthError, NotFoundError, TooManyAttemptsError
from portfolio_api.schemas import (
    BlogCategoryOut,
    BlogPostOut,
    CaseStudyOut,
    CertificationOut,
    ContactRequest,
    ErrorResponse,
    ExperienceOut,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProjectOut,
    SectionOut,
    SessionResponse,
    SubscribeRequest,
    SubscriptionOut,
    SubscriptionResponse,
    TestimonialOut,
    TestimonialSubmit,
    UserOut,
)
from portfolio_api.sessions import SessionRecord, SessionStore
from portfolio_api.throttle import AttemptLimiter
from portfolio_api.types import PostStatus, SectionType, SubscriptionStatus

logger = logging.getLogger(__name__)

router = APIRouter(responses={400: {"model": ErrorResponse}})

_SECTION_TYPES = {section_type.value for section_type in SectionType}


# ---------- Session gate ----------


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: DbClient = Depends(get_db_client),
    sessions: SessionStore = Depends(get_session_store),
    limiter: AttemptLimiter = Depends(get_login_limiter),
    settings: Settings = Depends(get_settings),
):
    """
    Check credentials and open a server-side session referenced by cookie.

    Failed attempts count against the caller's address; a success clears them.
    """
    address = client_address(request)
    if limiter.is_blocked(address):
        logger.warning("Login blocked for %s: too many failed attempts", address)
        raise TooManyAttemptsError("Too many login attempts, please try again later.")

    user = authenticate_user(db, payload.username, payload.password)
    if user is None:
        attempts = limiter.hit(address)
        logger.warning(
            "Failed login for %s from %s (%d attempts)",
            payload.username,
            address,
            attempts,
        )
        raise AuthError("Invalid username or password")

    limiter.reset(address)
    session = sessions.create(user.id, user.username)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    logger.info("User %s logged in", user.username)
    return LoginResponse(
        success=True,
        message="Login successful",
        user=UserOut(id=user.id, username=user.username),
    )


@router.get("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        sessions.destroy(token)
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(success=True, message="Logout successful")


@router.get("/session", response_model=SessionResponse)
def session_status(session: Optional[SessionRecord] = Depends(get_current_session)):
    if session is None:
        return SessionResponse(is_authenticated=False)
    return SessionResponse(
        is_authenticated=True,
        user=UserOut(id=session.user_id, username=session.username),
    )


# ---------- Sections ----------


@router.get("/sections", response_model=list[SectionOut])
def list_sections(db: DbClient = Depends(get_db_client)):
    return db.list_sections()


@router.get("/sections/{section_type}", response_model=list[SectionOut])
def list_sections_by_type(section_type: str, db: DbClient = Depends(get_db_client)):
    if section_type not in _SECTION_TYPES:
        raise HTTPException(status_code=400, detail="Invalid section type")
    return db.list_sections(section_type)


# ---------- Projects ----------


@router.get("/projects", response_model=list[ProjectOut])
def list_projects(db: DbClient = Depends(get_db_client)):
    return db.list_projects()


@router.get("/projects/featured", response_model=list[ProjectOut])
def featured_projects(db: DbClient = Depends(get_db_client)):
    return db.featured_projects()


@router.get("/projects/{category}", response_model=list[ProjectOut])
def list_projects_by_category(category: str, db: DbClient = Depends(get_db_client)):
    return db.list_projects(category)


# ---------- Experiences and certifications ----------


@router.get("/experiences", response_model=list[ExperienceOut])
def list_experiences(db: DbClient = Depends(get_db_client)):
    return db.list_experiences()


@router.get("/certifications", response_model=list[CertificationOut])
def list_certifications(db: DbClient = Depends(get_db_client)):
    return db.list_certifications()


@router.get("/certifications/featured", response_model=list[CertificationOut])
def featured_certifications(db: DbClient = Depends(get_db_client)):
    return db.featured_certifications()


# ---------- Blog ----------


def _published_post(db: DbClient, slug: str):
    post = db.get_blog_post_by_slug(slug)
    if post is None or post.status != PostStatus.PUBLISHED.value:
        raise NotFoundError("Blog post not found")
    return post


@router.get("/blog/posts", response_model=list[BlogPostOut])
def list_blog_posts(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    """Published posts, newest first, optionally narrowed by category slug and tag."""
    if category:
        blog_category = db.get_blog_category_by_slug(category)
        if blog_category is None:
            raise NotFoundError("Blog category not found")
        posts = db.blog_posts_by_category(blog_category.id)
    else:
        posts = db.published_blog_posts()
    if tag:
        tagged = {post.id for post in db.blog_posts_by_tag(tag)}
        posts = [post for post in posts if post.id in tagged]
    return posts


@router.get("/blog/posts/{slug}", response_model=BlogPostOut)
def get_blog_post(slug: str, db: DbClient = Depends(get_db_client)):
    return _published_post(db, slug)


@router.get("/blog/posts/{slug}/case-study", response_model=CaseStudyOut)
def get_blog_post_case_study(slug: str, db: DbClient = Depends(get_db_client)):
    post = _published_post(db, slug)
    case_study = db.get_case_study_for_post(post.id)
    if case_study is None:
        raise NotFoundError("Case study not found")
    return case_study


@router.get("/blog/categories", response_model=list[BlogCategoryOut])
def list_blog_categories(db: DbClient = Depends(get_db_client)):
    return db.blog_categories.list()


@router.post("/blog/subscribe", response_model=SubscriptionResponse)
def subscribe(
    payload: SubscribeRequest,
    response: Response,
    db: DbClient = Depends(get_db_client),
):
    subscription, created = db.request_subscription(payload.email, payload.name)
    if subscription.status == SubscriptionStatus.ACTIVE.value:
        return SubscriptionResponse(
            success=True,
            message="You are already subscribed",
            subscription=SubscriptionOut.model_validate(subscription),
        )

    # No mail delivery here; the token is logged so the address can be confirmed.
    logger.info(
        "Subscription pending for %s (token=%s)",
        subscription.email,
        subscription.confirmation_token,
    )
    if created:
        response.status_code = 201
    return SubscriptionResponse(
        success=True,
        message="Please check your email to confirm your subscription",
        subscription=SubscriptionOut.model_validate(subscription),
    )


@router.get("/blog/confirm-subscription/{token}", response_model=MessageResponse)
def confirm_subscription(token: str, db: DbClient = Depends(get_db_client)):
    subscription = db.confirm_subscription(token)
    if subscription is None:
        raise NotFoundError("Invalid or expired confirmation token")
    logger.info("Subscription confirmed for %s", subscription.email)
    return MessageResponse(success=True, message="Subscription confirmed")


@router.get("/blog/unsubscribe/{email}", response_model=MessageResponse)
def unsubscribe(email: str, db: DbClient = Depends(get_db_client)):
    if not db.unsubscribe(email):
        raise NotFoundError("Subscription not found")
    logger.info("Unsubscribed %s", email)
    return MessageResponse(success=True, message="You have been unsubscribed")


# ---------- Testimonials ----------


@router.get("/testimonials", response_model=list[TestimonialOut])
def list_testimonials(db: DbClient = Depends(get_db_client)):
    return db.approved_testimonials()


@router.post("/testimonials/submit", response_model=MessageResponse, status_code=201)
def submit_testimonial(
    payload: TestimonialSubmit,
    request: Request,
    db: DbClient = Depends(get_db_client),
    limiter: AttemptLimiter = Depends(get_submission_limiter),
):
    address = client_address(request)
    if limiter.is_blocked(address):
        raise TooManyAttemptsError("Too many submissions, please try again later.")
    limiter.hit(address)

    record = db.testimonials.create({**payload.model_dump(), "approved": False})
    logger.info("Testimonial %s submitted by %s", record.id, record.name)
    return MessageResponse(
        success=True,
        message="Thank you! Your testimonial has been submitted for review.",
    )


# ---------- Contact ----------


@router.post("/contact", response_model=MessageResponse)
def contact(payload: ContactRequest):
    logger.info(
        "Contact form submission from %s <%s>: %s",
        payload.name,
        payload.email,
        payload.subject,
    )
    return MessageResponse(
        success=True,
        message="Thank you for your message! I'll get back to you soon.",
    )
