"""
Social media notifier announcing newly published blog posts.

Posting is best effort: every platform failure is reported in the result and
never raised to the caller.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from portfolio_api.config import Settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds
TWITTER_API_URL = "https://api.twitter.com/2/tweets"
TWITTER_MAX_CHARS = 280
BLUESKY_MAX_CHARS = 300


@dataclass
class TwitterConfig:
    enabled: bool = False
    access_token: Optional[str] = None


@dataclass
class BlueskyConfig:
    enabled: bool = False
    identifier: Optional[str] = None
    password: Optional[str] = None
    service_url: str = "https://bsky.social"


@dataclass
class NotifierConfig:
    twitter: TwitterConfig = field(default_factory=TwitterConfig)
    bluesky: BlueskyConfig = field(default_factory=BlueskyConfig)
    post_format: str = "{title}\n\n{excerpt}\n\nRead more: {url}"
    include_tags: bool = True
    base_url: str = "http://localhost:5001/blog/"


@dataclass
class PlatformResult:
    success: bool
    message: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class AnnouncedPost:
    """The subset of a blog post the notifier needs."""

    title: str
    excerpt: str
    slug: str
    tags: list[str] = field(default_factory=list)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


class SocialMediaNotifier:
    def __init__(self, config: NotifierConfig | None = None):
        self._config = config or NotifierConfig()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SocialMediaNotifier":
        return cls(
            NotifierConfig(
                twitter=TwitterConfig(
                    enabled=settings.twitter_enabled,
                    access_token=settings.twitter_access_token,
                ),
                bluesky=BlueskyConfig(
                    enabled=settings.bluesky_enabled,
                    identifier=settings.bluesky_identifier,
                    password=settings.bluesky_password,
                    service_url=settings.bluesky_service_url,
                ),
                post_format=settings.social_post_format,
                include_tags=settings.social_include_tags,
                base_url=settings.site_url,
            )
        )

    def get_config(self) -> NotifierConfig:
        with self._lock:
            return copy.deepcopy(self._config)

    def update_config(self, changes: dict[str, Any]) -> NotifierConfig:
        """Merge ``changes`` into the config; nested platform dicts merge too."""
        with self._lock:
            changes = dict(changes)
            twitter = replace(self._config.twitter, **(changes.pop("twitter", None) or {}))
            bluesky = replace(self._config.bluesky, **(changes.pop("bluesky", None) or {}))
            self._config = replace(
                self._config, twitter=twitter, bluesky=bluesky, **changes
            )
            return copy.deepcopy(self._config)

    def format_post(
        self,
        post: AnnouncedPost,
        config: NotifierConfig | None = None,
        limit: int | None = None,
    ) -> str:
        """
        Render ``post`` with the configured template.

        With a ``limit`` the excerpt is shortened first, then hashtags are
        dropped, then the title is shortened. The URL is always kept whole.
        """
        config = config or self.get_config()
        url = f"{config.base_url.rstrip('/')}/{post.slug}"
        hashtags = ""
        if config.include_tags and post.tags:
            hashtags = " ".join("#" + "".join(tag.split()) for tag in post.tags if tag)

        def render(title: str, excerpt: str, tags: str) -> str:
            text = (
                config.post_format.replace("{title}", title)
                .replace("{excerpt}", excerpt)
                .replace("{url}", url)
            )
            return f"{text}\n\n{tags}" if tags else text

        excerpt = post.excerpt or ""
        text = render(post.title, excerpt, hashtags)
        if limit is None or len(text) <= limit:
            return text

        for tags in (hashtags, ""):
            spare = limit - len(render(post.title, "", tags))
            if spare > 0:
                candidate = render(post.title, _truncate(excerpt, spare), tags)
                if len(candidate) <= limit:
                    return candidate
        spare = limit - len(render("", "", ""))
        if spare > 0:
            return render(_truncate(post.title, spare), "", "")
        return url

    def publish(self, post: AnnouncedPost) -> dict:
        """Announce ``post`` on every enabled platform."""
        return self._send(post, self.get_config())

    def send_test(self) -> dict:
        post = AnnouncedPost(
            title="Test Post",
            excerpt="This is a test post to verify social media integration.",
            slug="test",
            tags=["test"],
        )
        return self.publish(post)

    def _send(self, post: AnnouncedPost, config: NotifierConfig) -> dict:
        platforms: dict[str, PlatformResult] = {}
        if config.twitter.enabled:
            text = self.format_post(post, config, TWITTER_MAX_CHARS)
            platforms["twitter"] = self._post_to_twitter(text, config.twitter)
        if config.bluesky.enabled:
            text = self.format_post(post, config, BLUESKY_MAX_CHARS)
            platforms["bluesky"] = self._post_to_bluesky(text, config.bluesky)

        if not platforms:
            return {
                "success": False,
                "message": "No social media platforms are enabled",
                "platforms": {},
            }
        succeeded = [name for name, result in platforms.items() if result.success]
        if succeeded:
            message = "Posted to " + ", ".join(succeeded)
        else:
            message = "Social media posting failed"
        return {
            "success": bool(succeeded),
            "message": message,
            "platforms": {name: result.as_dict() for name, result in platforms.items()},
        }

    def _post_to_twitter(self, text: str, config: TwitterConfig) -> PlatformResult:
        if not config.access_token:
            return PlatformResult(False, "Twitter credentials are missing")
        try:
            response = requests.post(
                TWITTER_API_URL,
                json={"text": text},
                headers={"Authorization": f"Bearer {config.access_token}"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            tweet_id = response.json().get("data", {}).get("id")
        except (requests.RequestException, ValueError) as exc:
            logger.error("Twitter post error: %s", exc)
            return PlatformResult(False, f"Twitter post failed: {exc}")
        logger.info("Posted to Twitter (id=%s)", tweet_id)
        return PlatformResult(True, "Successfully posted to Twitter")

    def _post_to_bluesky(self, text: str, config: BlueskyConfig) -> PlatformResult:
        if not config.identifier or not config.password:
            return PlatformResult(False, "Bluesky credentials are missing")
        base = config.service_url.rstrip("/")
        try:
            auth = requests.post(
                f"{base}/xrpc/com.atproto.server.createSession",
                json={"identifier": config.identifier, "password": config.password},
                timeout=REQUEST_TIMEOUT,
            )
            auth.raise_for_status()
            session = auth.json()
            created_at = (
                datetime.now(timezone.utc).isoformat(timespec="milliseconds")
                .replace("+00:00", "Z")
            )
            response = requests.post(
                f"{base}/xrpc/com.atproto.repo.createRecord",
                json={
                    "repo": session["did"],
                    "collection": "app.bsky.feed.post",
                    "record": {
                        "$type": "app.bsky.feed.post",
                        "text": text,
                        "createdAt": created_at,
                    },
                },
                headers={"Authorization": f"Bearer {session['accessJwt']}"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except (requests.RequestException, KeyError, ValueError) as exc:
            logger.error("Bluesky post error: %s", exc)
            return PlatformResult(False, f"Bluesky post failed: {exc}")
        logger.info("Posted to Bluesky as %s", config.identifier)
        return PlatformResult(True, "Successfully posted to Bluesky")
