"""
SQLAlchemy table definitions backing ``PostgresDbClient``.

Column names match the record dataclass fields one to one so rows can be
copied into records generically.
"""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class SectionRow(Base):
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(Text, nullable=True)
    content = Column(JSON, nullable=False)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ProjectRow(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    technologies = Column(JSON, nullable=False)
    year = Column(String(10), nullable=True)
    role = Column(Text, nullable=True)
    icon = Column(String(50), nullable=True)
    github_link = Column(String(255), nullable=True)
    external_link = Column(String(255), nullable=True)
    image_url = Column(String(512), nullable=True)
    challenges = Column(JSON, nullable=True)
    outcomes = Column(JSON, nullable=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    featured_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ExperienceRow(Base):
    __tablename__ = "experiences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company = Column(String(255), nullable=False)
    role = Column(String(255), nullable=False)
    period = Column(String(100), nullable=False)
    description = Column(JSON, nullable=False)
    achievements = Column(JSON, nullable=False)
    methodologies = Column(JSON, nullable=False)
    order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class CertificationRow(Base):
    __tablename__ = "certifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    issuer = Column(String(255), nullable=False)
    issue_date = Column(String(50), nullable=False)
    expiry_date = Column(String(50), nullable=True)
    credential_id = Column(String(255), nullable=True)
    credential_url = Column(String(512), nullable=True)
    description = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    image_url = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class BlogCategoryRow(Base):
    __tablename__ = "blog_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class BlogPostRow(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    excerpt = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="draft", index=True)
    publish_date = Column(DateTime(timezone=True), nullable=True)
    category_id = Column(Integer, nullable=True, index=True)
    featured_image = Column(String(512), nullable=True)
    tags = Column(JSON, nullable=False)
    user_id = Column(Integer, nullable=True)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class BlogSubscriptionRow(Base):
    __tablename__ = "blog_subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default="pending")
    name = Column(String(255), nullable=True)
    confirmation_token = Column(String(64), nullable=True, index=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class CaseStudyDetailRow(Base):
    __tablename__ = "case_study_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    blog_post_id = Column(Integer, nullable=False, unique=True, index=True)
    client = Column(String(255), nullable=False)
    project_type = Column(String(100), nullable=False, index=True)
    problem = Column(Text, nullable=False)
    solution = Column(Text, nullable=False)
    results = Column(Text, nullable=False)
    role = Column(String(255), nullable=True)
    duration = Column(String(100), nullable=True)
    technologies = Column(JSON, nullable=False)
    challenges = Column(JSON, nullable=False)
    learnings = Column(JSON, nullable=False)
    testimonial = Column(JSON, nullable=True)
    metrics = Column(JSON, nullable=False)
    gallery = Column(JSON, nullable=False)
    video_url = Column(String(512), nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    featured_order = Column(Integer, nullable=True)
    seo_keywords = Column(JSON, nullable=False)
    seo_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class TestimonialRow(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    role = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    rating = Column(Integer, nullable=True)
    approved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


ROW_MODELS = {
    "users": UserRow,
    "sections": SectionRow,
    "projects": ProjectRow,
    "experiences": ExperienceRow,
    "certifications": CertificationRow,
    "blog_categories": BlogCategoryRow,
    "blog_posts": BlogPostRow,
    "blog_subscriptions": BlogSubscriptionRow,
    "case_study_details": CaseStudyDetailRow,
    "testimonials": TestimonialRow,
}
