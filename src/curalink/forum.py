import logging
import time
from datetime import date
from typing import List

from pydantic import ValidationError

from .profiles import IncompleteFormError, get_account_type, load_profile
from .schemas import ForumPost
from .storage import KeyValueStore, read_json, write_json

LOGGER = logging.getLogger("curalink.forum")

FORUM_POSTS_KEY = "forumPosts"

AVAILABLE_CATEGORIES = (
    "General Discussion",
    "Research Questions",
    "Clinical Trials",
    "Treatment Options",
    "Patient Experience",
    "Collaboration Opportunities",
)

SEED_POSTS: tuple[ForumPost, ...] = (
    ForumPost(
        id="1",
        title="Experiences with Deep Brain Stimulation?",
        category="Parkinson's Disease",
        author="John Smith",
        author_type="patient",
        content="I'm considering DBS therapy and would love to hear from others who have tried it...",
        replies=12,
        date="2025-01-10",
    ),
    ForumPost(
        id="2",
        title="Latest Research on Stem Cell Therapy",
        category="Parkinson's Disease",
        author="Dr. Sarah Chen",
        author_type="researcher",
        content="Here's a summary of recent findings in stem cell therapy for movement disorders...",
        replies=8,
        date="2025-01-09",
    ),
    ForumPost(
        id="3",
        title="Diet and Breast Cancer Prevention",
        category="Breast Cancer",
        author="Jane Doe",
        author_type="patient",
        content="What dietary changes have you found helpful?",
        replies=15,
        date="2025-01-08",
    ),
    ForumPost(
        id="4",
        title="Clinical Trial Enrollment Tips",
        category="General",
        author="Dr. Michael Brown",
        author_type="researcher",
        content="Guide for patients considering clinical trial participation...",
        replies=6,
        date="2025-01-07",
    ),
)


class Forum:
    """Seeded community posts plus the posts created on this device (newest first)."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _user_posts(self) -> List[ForumPost]:
        raw = read_json(self.store, FORUM_POSTS_KEY, [])
        if not isinstance(raw, list):
            LOGGER.warning("Ignoring %s: expected a list, got %s", FORUM_POSTS_KEY, type(raw).__name__)
            return []
        try:
            return [ForumPost.model_validate(item) for item in raw]
        except ValidationError:
            LOGGER.warning("Ignoring unreadable posts in %s", FORUM_POSTS_KEY)
            return []

    def posts(self) -> List[ForumPost]:
        return self._user_posts() + list(SEED_POSTS)

    def categories(self) -> List[str]:
        seen = dict.fromkeys(post.category for post in self.posts())
        return ["all", *seen]

    def list_posts(self, query: str = "", category: str = "all") -> List[ForumPost]:
        needle = query.lower()
        return [
            post
            for post in self.posts()
            if (needle in post.title.lower() or needle in post.content.lower())
            and (category == "all" or post.category == category)
        ]

    def create_post(self, title: str, category: str, content: str, tags: str = "") -> ForumPost:
        fields = {"title": title.strip(), "category": category.strip(), "content": content.strip()}
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise IncompleteFormError(missing)

        profile = load_profile(self.store)
        post = ForumPost(
            id=str(time.time_ns() // 1_000_000),
            author=profile.name if profile and profile.name else "Anonymous",
            author_type=get_account_type(self.store) or "patient",
            replies=0,
            date=date.today().isoformat(),
            tags=tags.strip(),
            **fields,
        )
        saved = self._user_posts()
        write_json(self.store, FORUM_POSTS_KEY, [p.model_dump(by_alias=True) for p in [post, *saved]])
        LOGGER.info("Forum post %s created in %s", post.id, post.category)
        return post
