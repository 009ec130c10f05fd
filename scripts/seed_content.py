"""
Seed an empty store with sample portfolio content.

Each collection is only seeded when it is empty, so the script is safe to run
against a database that already holds data.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_api.auth import ensure_admin_user
from portfolio_api.config import get_settings
from portfolio_api.db import DbClient
from portfolio_api.dependencies import get_db_client

logger = logging.getLogger(__name__)

SECTIONS = [
    {
        "type": "hero",
        "title": "Jordan Lee",
        "subtitle": "Project Manager & App Developer",
        "content": {
            "description": "Project manager who builds applications and self-hosted tools.",
            "ctaText": "View My Work",
            "ctaLink": "#projects",
        },
        "display_order": 1,
    },
    {
        "type": "about",
        "title": "About Me",
        "subtitle": "Background & Expertise",
        "content": {
            "bio": "Eight years leading cross-functional delivery teams.",
            "skills": ["Project Management", "Agile", "Web Development", "DevOps"],
        },
        "display_order": 2,
    },
    {
        "type": "contact",
        "title": "Get In Touch",
        "subtitle": "Let's Connect",
        "content": {"email": "hello@jordanlee.dev", "location": "Remote"},
        "display_order": 3,
    },
]

PROJECTS = [
    {
        "title": "Resource Planning Rollout",
        "description": "Led an ERP rollout for a 500 person manufacturer.",
        "category": "professional",
        "technologies": ["SAP", "SQL Server", "Power BI"],
        "year": "2022",
        "featured": True,
        "featured_order": 1,
    },
    {
        "title": "Patient Scheduling App",
        "description": "Managed delivery of a patient-facing mobile app.",
        "category": "professional",
        "technologies": ["React Native", "Node.js"],
        "year": "2021",
        "featured": True,
        "featured_order": 2,
    },
    {
        "title": "Home Media Server",
        "description": "Self-hosted media streaming on a custom NAS.",
        "category": "personal",
        "technologies": ["Docker", "Jellyfin", "Linux"],
        "year": "2022",
        "github_link": "https://github.com/jordanlee/media-server",
    },
]

EXPERIENCES = [
    {
        "company": "Northwind Manufacturing",
        "role": "Senior Project Manager",
        "period": "2020 - Present",
        "description": ["Runs the digital transformation programme."],
        "achievements": ["Cut delivery time by 30%"],
        "methodologies": ["Scrum", "Kanban"],
        "order": 1,
    },
    {
        "company": "Contoso Health",
        "role": "Project Manager",
        "period": "2016 - 2020",
        "description": ["Delivered patient engagement products."],
        "achievements": ["Launched three mobile apps"],
        "methodologies": ["Scrum"],
        "order": 2,
    },
]

CERTIFICATIONS = [
    {
        "title": "Project Management Professional",
        "issuer": "PMI",
        "issue_date": "2019-06",
        "skills": ["Planning", "Risk Management"],
        "featured": True,
    },
]

CATEGORIES = [
    {"name": "Project Management", "slug": "project-management"},
    {"name": "Self-Hosting", "slug": "self-hosting"},
]

POSTS = [
    {
        "title": "Running a Home Media Server",
        "slug": "running-a-home-media-server",
        "excerpt": "What I learned building a NAS for streaming at home.",
        "content": "Start with the storage layout, then pick the software.",
        "category_slug": "self-hosting",
        "tags": ["self-hosting", "docker"],
        "status": "published",
        "publish_date": datetime(2024, 3, 1, tzinfo=timezone.utc),
    },
]


def _seed(name: str, existing: list, rows: list, create) -> int:
    if existing:
        logger.info("Skipping %s: %d records already present", name, len(existing))
        return 0
    for row in rows:
        create(dict(row))
    logger.info("Seeded %d %s", len(rows), name)
    return len(rows)


def _create_post(db: DbClient, fields: dict):
    category = db.get_blog_category_by_slug(fields.pop("category_slug"))
    fields["category_id"] = category.id if category else None
    return db.create_blog_post(fields)


def seed(db: DbClient) -> int:
    total = 0
    total += _seed("sections", db.sections.list(), SECTIONS, db.sections.create)
    total += _seed("projects", db.projects.list(), PROJECTS, db.projects.create)
    total += _seed("experiences", db.experiences.list(), EXPERIENCES, db.create_experience)
    total += _seed(
        "certifications", db.certifications.list(), CERTIFICATIONS, db.certifications.create
    )
    total += _seed(
        "blog categories", db.blog_categories.list(), CATEGORIES, db.blog_categories.create
    )
    total += _seed(
        "blog posts",
        db.blog_posts.list(),
        POSTS,
        lambda fields: _create_post(db, fields),
    )
    return total


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample portfolio content")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all stored data before seeding",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    db = get_db_client()
    if args.reset:
        logger.warning("Deleting all stored data")
        db.reset()
    ensure_admin_user(db, settings.admin_username, settings.admin_password)
    total = seed(db)
    logger.info("Done, %d records created", total)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
