"""
Enumerations shared by the store, the schemas and the routes.
"""

from __future__ import annotations

from enum import Enum


class SectionType(str, Enum):
    HERO = "hero"
    ABOUT = "about"
    PROFESSIONAL_PROJECT = "professionalProject"
    PERSONAL_PROJECT = "personalProject"
    EXPERIENCE = "experience"
    CONTACT = "contact"
    CERTIFICATION = "certification"
    FEATURED_PROJECT = "featuredProject"


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"
    PENDING = "pending"
