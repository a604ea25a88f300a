from __future__ import annotations

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import re
from typing import Any, Callable, Iterable, Optional

from loguru import logger

from .client import TwelveLabsClient
from .errors import TwelveLabsError

KEYWORD_VIDEO_PAGE_LIMIT = 10
GIST_VIDEO_LIMIT = 5
SUMMARY_VIDEO_LIMIT = 3
TOP_TERMS = 6
COMBINED_TERMS = 8
_MIN_WORD_LENGTH = 4

_STOPWORDS = frozenset(
    """
    this that with from have been were they their would could should about
    which there these other into some than then them what when where while
    being video shows appears
    """.split()
)
_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass
class KeywordReport:
    keywords: list[str]
    source: str
    video_count: int
    topics: list[str] = field(default_factory=list)
    hashtags: list[str] = field(default_factory=list)
    message: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        if self.message is not None:
            return {"keywords": self.keywords, "message": self.message}
        payload: dict[str, Any] = {
            "keywords": self.keywords,
            "source": self.source,
            "videoCount": self.video_count,
        }
        if self.source == "gist":
            payload["topics"] = self.topics
            payload["hashtags"] = self.hashtags
        return payload


def top_terms(terms: Iterable[str], limit: int = TOP_TERMS) -> list[str]:
    """
    Most frequent terms after lowercasing and trimming; ties keep first-seen order.
    """
    counts = Counter(t.strip().lower() for t in terms if t and t.strip())
    return [term for term, _ in counts.most_common(limit)]


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def summary_keywords(summaries: Iterable[str], limit: int = TOP_TERMS) -> list[str]:
    """
    Pick frequent words from free-text summaries, skipping short and filler words.
    """
    text = _NON_WORD_RE.sub("", " ".join(summaries).lower())
    words = [
        w for w in text.split() if len(w) >= _MIN_WORD_LENGTH and w not in _STOPWORDS
    ]
    return top_terms(words, limit)


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _gist_for(client: TwelveLabsClient, video_id: str) -> Optional[dict[str, Any]]:
    try:
        return client.gist(video_id, ["topic", "hashtag"])
    except TwelveLabsError as exc:
        logger.warning("Gist failed for video {}: {}", video_id, exc)
        return None


def _summary_for(client: TwelveLabsClient, video_id: str) -> str:
    try:
        summary = client.summarize(video_id, "summary").get("summary")
    except TwelveLabsError as exc:
        logger.warning("Summary failed for video {}: {}", video_id, exc)
        return ""
    return summary if isinstance(summary, str) else ""


def _map_videos(client: TwelveLabsClient, func: Callable, video_ids: list[str]) -> list:
    if not video_ids:
        return []
    with ThreadPoolExecutor(
        max_workers=len(video_ids), thread_name_prefix="keywords"
    ) as pool:
        return list(pool.map(lambda vid: func(client, vid), video_ids))


def extract_keywords(client: TwelveLabsClient, index_id: str) -> KeywordReport:
    """
    Aggregate the most common topics and hashtags over the first videos of an index.

    Gist failures for single videos are logged and skipped. When no gist yields
    any term, frequent words from video summaries are used instead.

    Raises:
        TwelveLabsError: If the index's videos cannot be listed.
    """
    videos = client.list_videos(index_id, page_limit=KEYWORD_VIDEO_PAGE_LIMIT)
    if not videos:
        return KeywordReport([], "none", 0, message="No videos in index")
    video_ids = [v["_id"] for v in videos if isinstance(v.get("_id"), str)]

    topics: list[str] = []
    hashtags: list[str] = []
    for gist in _map_videos(client, _gist_for, video_ids[:GIST_VIDEO_LIMIT]):
        if not gist:
            continue
        topics.extend(_strings(gist.get("topics")))
        hashtags.extend(tag.removeprefix("#") for tag in _strings(gist.get("hashtags")))

    top_topics = top_terms(topics)
    top_hashtags = top_terms(hashtags)
    combined = _dedupe(top_topics + top_hashtags)[:COMBINED_TERMS]
    if combined:
        logger.info("Extracted {} keywords from gists of index {}", len(combined), index_id)
        return KeywordReport(
            combined, "gist", len(videos), topics=top_topics, hashtags=top_hashtags
        )

    logger.debug("No gist keywords for index {}; falling back to summaries", index_id)
    summaries = _map_videos(client, _summary_for, video_ids[:SUMMARY_VIDEO_LIMIT])
    return KeywordReport(summary_keywords(summaries), "summaries", len(videos))
