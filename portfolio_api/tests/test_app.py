import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from portfolio_api.app import create_app
from portfolio_api.auth import ensure_admin_user
from portfolio_api.db import InMemoryDbClient
from portfolio_api.dependencies import (
    get_db_client,
    get_login_limiter,
    get_notifier,
    get_session_store,
    get_submission_limiter,
)
from portfolio_api.notifier import SocialMediaNotifier
from portfolio_api.sessions import InMemorySessionStore
from portfolio_api.throttle import AttemptLimiter

ANNOUNCED = {
    "success": True,
    "message": "Posted to twitter",
    "platforms": {"twitter": {"success": True, "message": "Successfully posted to Twitter"}},
}


def _post_fields(slug, **overrides):
    fields = {
        "title": slug.replace("-", " ").title(),
        "slug": slug,
        "excerpt": "Short summary",
        "content": "Full body of the post",
    }
    fields.update(overrides)
    return fields


class PortfolioApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.sessions = InMemorySessionStore()
        self.login_limiter = AttemptLimiter(max_attempts=5, window_seconds=900)
        self.submission_limiter = AttemptLimiter(max_attempts=3, window_seconds=3600)
        self.notifier = SocialMediaNotifier()

        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        app.dependency_overrides[get_session_store] = lambda: self.sessions
        app.dependency_overrides[get_login_limiter] = lambda: self.login_limiter
        app.dependency_overrides[get_submission_limiter] = lambda: self.submission_limiter
        app.dependency_overrides[get_notifier] = lambda: self.notifier
        ensure_admin_user(self.db, "admin", "password123")
        self.client = TestClient(app)

    def login(self):
        response = self.client.post(
            "/api/login", json={"username": "admin", "password": "password123"}
        )
        self.assertEqual(response.status_code, 200)
        return response

    # ---------- Session gate ----------

    def test_admin_routes_reject_anonymous_requests(self):
        response = self.client.get("/api/admin/sections")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["success"], False)

        response = self.client.post(
            "/api/admin/sections",
            json={"type": "hero", "title": "Welcome", "content": ["Hi"]},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.db.sections.list(), [])

    def test_anonymous_update_and_delete_change_nothing(self):
        section = self.db.sections.create({"type": "hero", "title": "Welcome", "content": ["Hi"]})

        response = self.client.put(
            f"/api/admin/sections/{section.id}", json={"title": "Defaced"}
        )
        self.assertEqual(response.status_code, 401)
        response = self.client.delete(f"/api/admin/sections/{section.id}")
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

        stored = self.db.sections.get(section.id)
        self.assertIsNotNone(stored)
        self.assertEqual(stored.title, "Welcome")

    def test_login_then_logout_closes_admin_access(self):
        response = self.login()
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["user"]["username"], "admin")

        response = self.client.get("/api/admin/sections")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

        response = self.client.get("/api/logout")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

        response = self.client.get("/api/admin/sections")
        self.assertEqual(response.status_code, 401)

    def test_session_reports_state_without_side_effects(self):
        response = self.client.get("/api/session")
        self.assertEqual(response.json(), {"isAuthenticated": False, "user": None})

        self.login()
        response = self.client.get("/api/session")
        payload = response.json()
        self.assertTrue(payload["isAuthenticated"])
        self.assertEqual(payload["user"]["username"], "admin")

    def test_login_with_wrong_password(self):
        response = self.client.post(
            "/api/login", json={"username": "admin", "password": "nope"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(),
            {"success": False, "message": "Invalid username or password"},
        )

    def test_login_blocked_after_repeated_failures(self):
        for _ in range(5):
            response = self.client.post(
                "/api/login", json={"username": "admin", "password": "nope"}
            )
            self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/api/login", json={"username": "admin", "password": "password123"}
        )
        self.assertEqual(response.status_code, 429)
        self.assertFalse(response.json()["success"])

    def test_successful_login_clears_failed_attempts(self):
        for _ in range(4):
            self.client.post("/api/login", json={"username": "admin", "password": "nope"})
        self.login()
        for _ in range(4):
            response = self.client.post(
                "/api/login", json={"username": "admin", "password": "nope"}
            )
            self.assertEqual(response.status_code, 401)

    # ---------- Admin CRUD ----------

    def test_section_crud_flow(self):
        self.login()
        response = self.client.post(
            "/api/admin/sections",
            json={
                "type": "hero",
                "title": "Welcome",
                "subtitle": "Engineer",
                "content": ["Hello there"],
                "displayOrder": 1,
            },
        )
        self.assertEqual(response.status_code, 201)
        created = response.json()
        self.assertEqual(created["type"], "hero")
        self.assertEqual(created["displayOrder"], 1)
        section_id = created["id"]

        response = self.client.get(f"/api/admin/sections/{section_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["title"], "Welcome")

        response = self.client.put(
            f"/api/admin/sections/{section_id}", json={"title": "Hello"}
        )
        self.assertEqual(response.status_code, 200)
        updated = response.json()
        self.assertEqual(updated["title"], "Hello")
        self.assertEqual(updated["content"], ["Hello there"])
        self.assertEqual(updated["subtitle"], "Engineer")

        response = self.client.delete(f"/api/admin/sections/{section_id}")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

        response = self.client.get(f"/api/admin/sections/{section_id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"success": False, "message": "Section not found"}
        )
        response = self.client.delete(f"/api/admin/sections/{section_id}")
        self.assertEqual(response.status_code, 404)

    def test_create_with_invalid_body_returns_field_errors(self):
        self.login()
        response = self.client.post("/api/admin/sections", json={"title": ""})
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertFalse(payload["success"])
        fields = {error["field"] for error in payload["errors"]}
        self.assertIn("type", fields)
        self.assertIn("title", fields)
        self.assertIn("content", fields)
        self.assertEqual(self.db.sections.list(), [])

    def test_update_null_handling(self):
        self.login()
        section = self.db.sections.create(
            {"type": "about", "title": "About", "subtitle": "Me", "content": ["Bio"]}
        )

        response = self.client.put(
            f"/api/admin/sections/{section.id}", json={"title": None}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.db.sections.get(section.id).title, "About")

        response = self.client.put(
            f"/api/admin/sections/{section.id}", json={"subtitle": None}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["subtitle"])
        self.assertEqual(response.json()["title"], "About")

    def test_update_missing_record_returns_404(self):
        self.login()
        response = self.client.put("/api/admin/projects/99", json={"title": "Ghost"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Project not found")

    def test_experience_order_defaults_to_end_of_list(self):
        self.login()
        for company in ("Acme", "Globex"):
            response = self.client.post(
                "/api/admin/experiences",
                json={
                    "company": company,
                    "role": "Engineer",
                    "period": "2020 - 2022",
                    "description": ["Built things"],
                },
            )
            self.assertEqual(response.status_code, 201)

        response = self.client.get("/api/experiences")
        experiences = response.json()
        self.assertEqual([e["company"] for e in experiences], ["Acme", "Globex"])
        self.assertEqual([e["order"] for e in experiences], [1, 2])

    def test_certification_credential_fields_keep_acronym_casing(self):
        self.login()
        response = self.client.post(
            "/api/admin/certifications",
            json={
                "title": "Cloud Architect",
                "issuer": "Cloud Co",
                "issueDate": "2023-05",
                "credentialID": "ABC-123",
                "credentialURL": "https://certs.example.org/abc",
                "featured": True,
            },
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["credentialID"], "ABC-123")
        self.assertEqual(payload["credentialURL"], "https://certs.example.org/abc")

        response = self.client.get("/api/certifications/featured")
        self.assertEqual(len(response.json()), 1)

    def test_duplicate_slug_is_a_conflict(self):
        self.login()
        body = {"name": "Engineering", "slug": "engineering"}
        response = self.client.post("/api/admin/blog/categories", json=body)
        self.assertEqual(response.status_code, 201)
        response = self.client.post("/api/admin/blog/categories", json=body)
        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()["success"])

    def test_invalid_slug_rejected(self):
        self.login()
        response = self.client.post(
            "/api/admin/blog/posts", json=_post_fields("Not A Slug")
        )
        self.assertEqual(response.status_code, 400)

    # ---------- Blog posts and the notifier ----------

    def test_publishing_post_announces_it_once(self):
        self.login()
        with patch.object(self.notifier, "publish", return_value=ANNOUNCED) as publish:
            response = self.client.post(
                "/api/admin/blog/posts",
                json=_post_fields("draft-post", tags="python, fastapi"),
            )
            self.assertEqual(response.status_code, 201)
            draft = response.json()
            self.assertEqual(draft["status"], "draft")
            self.assertEqual(draft["tags"], ["python", "fastapi"])
            self.assertIsNone(draft["socialMedia"])
            publish.assert_not_called()

            response = self.client.put(
                f"/api/admin/blog/posts/{draft['id']}", json={"status": "published"}
            )
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["socialMedia"]["success"], True)
            self.assertEqual(publish.call_count, 1)
            announced = publish.call_args[0][0]
            self.assertEqual(announced.slug, "draft-post")

            response = self.client.put(
                f"/api/admin/blog/posts/{draft['id']}", json={"title": "Edited"}
            )
            self.assertEqual(response.status_code, 200)
            self.assertIsNone(response.json()["socialMedia"])
            self.assertEqual(publish.call_count, 1)

    def test_create_published_post_merges_notifier_result(self):
        self.login()
        with patch.object(self.notifier, "publish", return_value=ANNOUNCED):
            response = self.client.post(
                "/api/admin/blog/posts",
                json=_post_fields("live-post", status="published"),
            )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["socialMedia"]["platforms"]["twitter"]["success"], True)
        self.assertEqual(payload["userId"], self.db.get_user_by_username("admin").id)

    def test_notifier_failure_does_not_fail_the_request(self):
        self.login()
        with patch.object(self.notifier, "publish", side_effect=RuntimeError("boom")):
            response = self.client.post(
                "/api/admin/blog/posts",
                json=_post_fields("live-post", status="published"),
            )
        self.assertEqual(response.status_code, 201)
        social = response.json()["socialMedia"]
        self.assertFalse(social["success"])
        self.assertIn("boom", social["message"])
        self.assertIsNotNone(self.db.get_blog_post_by_slug("live-post"))

    def test_admin_lists_posts_by_status(self):
        self.login()
        self.db.create_blog_post(_post_fields("one"))
        self.db.create_blog_post(_post_fields("two", status="published"))

        response = self.client.get("/api/admin/blog/posts", params={"status": "draft"})
        self.assertEqual([p["slug"] for p in response.json()], ["one"])
        response = self.client.get("/api/admin/blog/posts")
        self.assertEqual(len(response.json()), 2)

    # ---------- Public reads ----------

    def test_sections_by_type_are_ordered(self):
        self.db.sections.create({"type": "hero", "title": "B", "content": [], "display_order": 2})
        self.db.sections.create({"type": "hero", "title": "A", "content": [], "display_order": 1})
        self.db.sections.create({"type": "about", "title": "C", "content": {"bio": "x"}})

        response = self.client.get("/api/sections/hero")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["title"] for s in response.json()], ["A", "B"])

        response = self.client.get("/api/sections/unknown")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_featured_projects_sorted_with_unordered_last(self):
        base = {"description": "d", "category": "personal", "featured": True}
        self.db.projects.create({"title": "Late", **base})
        self.db.projects.create({"title": "Second", "featured_order": 2, **base})
        self.db.projects.create({"title": "First", "featured_order": 1, **base})
        self.db.projects.create({"title": "Hidden", **{**base, "featured": False}})

        response = self.client.get("/api/projects/featured")
        self.assertEqual(
            [p["title"] for p in response.json()], ["First", "Second", "Late"]
        )
        response = self.client.get("/api/projects/personal")
        self.assertEqual(len(response.json()), 4)

    def test_project_update_can_feature_it(self):
        self.login()
        project = self.db.projects.create(
            {"title": "Tool", "description": "d", "category": "personal"}
        )
        self.assertEqual(self.client.get("/api/projects/featured").json(), [])

        response = self.client.put(
            f"/api/admin/projects/{project.id}",
            json={"featured": True, "featuredOrder": 1},
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["featured"])
        self.assertEqual(response.json()["featuredOrder"], 1)
        self.assertEqual(response.json()["title"], "Tool")

        response = self.client.get("/api/projects/featured")
        self.assertEqual([p["title"] for p in response.json()], ["Tool"])

        response = self.client.put(
            f"/api/admin/projects/{project.id}", json={"featured": None}
        )
        self.assertEqual(response.status_code, 400)
        self.assertTrue(self.db.projects.get(project.id).featured)

    def test_public_blog_hides_drafts_and_filters(self):
        category = self.db.blog_categories.create({"name": "Engineering", "slug": "engineering"})
        self.db.create_blog_post(
            _post_fields(
                "older",
                status="published",
                category_id=category.id,
                tags=["python"],
                publish_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )
        )
        self.db.create_blog_post(
            _post_fields(
                "newer",
                status="published",
                tags=["rust"],
                publish_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
            )
        )
        self.db.create_blog_post(_post_fields("secret"))

        response = self.client.get("/api/blog/posts")
        self.assertEqual([p["slug"] for p in response.json()], ["newer", "older"])

        response = self.client.get("/api/blog/posts", params={"category": "engineering"})
        self.assertEqual([p["slug"] for p in response.json()], ["older"])

        response = self.client.get("/api/blog/posts", params={"tag": "rust"})
        self.assertEqual([p["slug"] for p in response.json()], ["newer"])

        response = self.client.get("/api/blog/posts/secret")
        self.assertEqual(response.status_code, 404)
        response = self.client.get("/api/blog/posts/older")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["categoryId"], category.id)

    def test_public_blog_category_and_tag_filters_combine(self):
        category = self.db.blog_categories.create({"name": "Engineering", "slug": "engineering"})
        self.db.create_blog_post(
            _post_fields("in-both", status="published", category_id=category.id, tags=["python"])
        )
        self.db.create_blog_post(
            _post_fields("wrong-tag", status="published", category_id=category.id, tags=["go"])
        )
        self.db.create_blog_post(_post_fields("no-category", status="published", tags=["python"]))
        self.db.create_blog_post(
            _post_fields("draft-match", category_id=category.id, tags=["python"])
        )

        response = self.client.get(
            "/api/blog/posts", params={"category": "engineering", "tag": "python"}
        )
        self.assertEqual([p["slug"] for p in response.json()], ["in-both"])

        response = self.client.get("/api/blog/posts", params={"tag": "python"})
        self.assertEqual(
            sorted(p["slug"] for p in response.json()), ["in-both", "no-category"]
        )

        response = self.client.get("/api/blog/posts", params={"category": "missing"})
        self.assertEqual(response.status_code, 404)

    def test_case_study_for_published_post(self):
        self.login()
        post = self.db.create_blog_post(_post_fields("migration", status="published"))
        response = self.client.post(
            "/api/admin/case-studies",
            json={
                "blogPostId": post.id,
                "client": "Initech",
                "projectType": "migration",
                "problem": "Legacy stack",
                "solution": "Rewrite",
                "results": "Faster",
                "metrics": [{"name": "Latency", "value": "-40%"}],
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["metrics"][0]["name"], "Latency")

        response = self.client.get("/api/blog/posts/migration/case-study")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["client"], "Initech")

        response = self.client.get(
            "/api/admin/case-studies", params={"projectType": "other"}
        )
        self.assertEqual(response.json(), [])

        response = self.client.post(
            "/api/admin/case-studies",
            json={
                "blogPostId": post.id,
                "client": "Again",
                "projectType": "migration",
                "problem": "p",
                "solution": "s",
                "results": "r",
            },
        )
        self.assertEqual(response.status_code, 409)

    def test_case_study_cannot_point_at_missing_post(self):
        self.login()
        post = self.db.create_blog_post(_post_fields("rollout", status="published"))
        other = self.db.create_blog_post(_post_fields("followup", status="published"))
        case_study = self.db.case_studies.create(
            {
                "blog_post_id": post.id,
                "client": "Globex",
                "project_type": "rollout",
                "problem": "p",
                "solution": "s",
                "results": "r",
            }
        )

        response = self.client.put(
            f"/api/admin/case-studies/{case_study.id}", json={"blogPostId": 999}
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Blog post not found")
        self.assertEqual(self.db.case_studies.get(case_study.id).blog_post_id, post.id)

        response = self.client.put(
            f"/api/admin/case-studies/{case_study.id}",
            json={"blogPostId": other.id, "client": "Globex Corp"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["blogPostId"], other.id)
        self.assertEqual(response.json()["client"], "Globex Corp")

        response = self.client.put("/api/admin/case-studies/999", json={"client": "Nobody"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Case study not found")

    # ---------- Submissions ----------

    def test_testimonial_submission_needs_approval(self):
        response = self.client.post(
            "/api/testimonials/submit",
            json={"name": "Jamie", "content": "Great to work with on our project.", "rating": 5},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.client.get("/api/testimonials").json(), [])

        testimonial = self.db.testimonials.list()[0]
        self.assertFalse(testimonial.approved)

        self.login()
        response = self.client.put(
            f"/api/admin/testimonials/{testimonial.id}", json={"approved": True}
        )
        self.assertEqual(response.status_code, 200)
        public = self.client.get("/api/testimonials").json()
        self.assertEqual([t["name"] for t in public], ["Jamie"])

    def test_testimonial_submissions_are_rate_limited(self):
        body = {"name": "Jamie", "content": "Great to work with on our project."}
        for _ in range(3):
            response = self.client.post("/api/testimonials/submit", json=body)
            self.assertEqual(response.status_code, 201)
        response = self.client.post("/api/testimonials/submit", json=body)
        self.assertEqual(response.status_code, 429)
        self.assertEqual(len(self.db.testimonials.list()), 3)

    def test_contact_form_validation(self):
        response = self.client.post(
            "/api/contact",
            json={"name": "J", "email": "not-an-email", "subject": "Hi", "message": "short"},
        )
        self.assertEqual(response.status_code, 400)
        fields = {error["field"] for error in response.json()["errors"]}
        self.assertEqual(fields, {"name", "email", "subject", "message"})

        response = self.client.post(
            "/api/contact",
            json={
                "name": "Jamie",
                "email": "jamie@portfolio.dev",
                "subject": "Hello",
                "message": "I would like to talk about a project.",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

    def test_subscription_lifecycle(self):
        email = "reader@portfolio.dev"
        response = self.client.post("/api/blog/subscribe", json={"email": email})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["subscription"]["status"], "pending")
        self.assertNotIn("confirmationToken", response.json()["subscription"])
        first_token = self.db.get_subscription_by_email(email).confirmation_token

        response = self.client.post("/api/blog/subscribe", json={"email": email})
        self.assertEqual(response.status_code, 200)
        token = self.db.get_subscription_by_email(email).confirmation_token
        self.assertNotEqual(token, first_token)

        response = self.client.get(f"/api/blog/confirm-subscription/{first_token}")
        self.assertEqual(response.status_code, 404)
        response = self.client.get(f"/api/blog/confirm-subscription/{token}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.get_subscription_by_email(email).status, "active")

        response = self.client.post("/api/blog/subscribe", json={"email": email})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "You are already subscribed")

        response = self.client.get(f"/api/blog/unsubscribe/{email}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.get_subscription_by_email(email).status, "unsubscribed")

        response = self.client.get("/api/blog/unsubscribe/nobody@portfolio.dev")
        self.assertEqual(response.status_code, 404)

    def test_admin_can_list_and_delete_subscriptions(self):
        subscription, _ = self.db.request_subscription("reader@portfolio.dev")
        self.login()
        response = self.client.get("/api/admin/blog/subscriptions")
        self.assertEqual([s["email"] for s in response.json()], ["reader@portfolio.dev"])

        response = self.client.delete(f"/api/admin/blog/subscriptions/{subscription.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.blog_subscriptions.list(), [])

    # ---------- Social media admin ----------

    def test_social_media_config_hides_credentials(self):
        self.login()
        response = self.client.put(
            "/api/admin/social-media/config",
            json={"twitter": {"enabled": True, "accessToken": "secret-token"}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("secret-token", response.text)
        payload = response.json()
        self.assertEqual(payload["twitter"], {"enabled": True, "configured": True})
        self.assertFalse(payload["bluesky"]["enabled"])

        response = self.client.get("/api/admin/social-media/config")
        self.assertTrue(response.json()["twitter"]["configured"])
        self.assertEqual(self.notifier.get_config().twitter.access_token, "secret-token")

    def test_social_media_test_without_platforms(self):
        self.login()
        response = self.client.post("/api/admin/social-media/test")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "success": False,
                "message": "No social media platforms are enabled",
                "platforms": {},
            },
        )

    def test_unknown_route_uses_error_envelope(self):
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["success"], False)


if __name__ == "__main__":
    unittest.main()
