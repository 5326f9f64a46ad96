"""Content generator: turn one topic into one complete article draft."""

from __future__ import annotations

import logging
import math
import random
import re
import unicodedata
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Callable

from pydantic import ValidationError

from autopress.config import Settings
from autopress.errors import BackendError, BackendUnavailable, GenerationError
from autopress.gemini import GeminiClient
from autopress.models import (
    MAX_KEYWORDS,
    MAX_TAGS,
    META_DESCRIPTION_CHARS,
    META_TITLE_CHARS,
    ArticleDraft,
    Topic,
    utcnow,
)

logger = logging.getLogger(__name__)

WORDS_PER_SECTION = 500
SUMMARY_SOURCE_CHARS = 2000
SLUG_BASE_CHARS = 50
CONTENT_END_MARKER = "</article>"

FALLBACK_INTRO = (
    "Artificial intelligence is quickly making its way into everyday life. From "
    "getting more done at work to unlocking new creative possibilities, the right "
    "tools make a real difference. This guide walks through what is worth knowing."
)
FALLBACK_SECTION = (
    "This is placeholder content produced while the writing backend is unavailable. "
    "Once an API key is configured, this section will contain generated text."
)
FALLBACK_CONCLUSION = (
    "That covers the essentials. Pick one idea from this article and try it this "
    "week, then share what worked for you in the comments."
)
FALLBACK_SUMMARY = "A practical overview of the topic with the key points and next steps."

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "tech": [
        "ai", "artificial intelligence", "chatgpt", "programming", "coding", "software",
        "gadget", "technology", "tech", "python",
        "编程", "软件", "数码", "科技",
    ],
    "finance": [
        "money", "finance", "investing", "investment", "side hustle", "income", "budget",
        "赚钱", "理财", "投资", "副业", "收入",
    ],
    "lifestyle": [
        "health", "healthy", "lifestyle", "living", "productivity", "tools", "habits",
        "photography",
        "健康", "生活", "效率", "工具", "方法",
    ],
    "education": [
        "learn", "learning", "tutorial", "beginner", "course", "skills",
        "学习", "教程", "入门", "课程", "技能",
    ],
}

CATEGORY_TAGS: dict[str, list[str]] = {
    "tech": ["artificial intelligence", "technology", "tools"],
    "finance": ["making money", "side hustle", "financial freedom"],
    "lifestyle": ["productivity", "lifestyle", "how-to"],
    "education": ["learning", "tutorial", "skills"],
}

PRODUCT_LINKS: tuple[tuple[str, str], ...] = (
    ("ChatGPT", "https://chat.openai.com"),
    ("Notion", "https://notion.so"),
    ("Midjourney", "https://midjourney.com"),
)

_STOP_WORDS = frozenset(
    """
    about after also because been before being could does each even from have here
    into just like made make many more most much only other over should some such
    than that their them then there these they this those through very were what
    when where which while will with would your using used article
    """.split()
)

_TAG_RE = re.compile(r"<[^>]+>")
_CJK_RE = re.compile(r"[\u4e00-\u9fa5]")
_TOKEN_RE = re.compile(r"[\u4e00-\u9fa5]{2,6}|\b[A-Za-z][A-Za-z'-]{3,14}\b")
_LATIN_WORD_RE = re.compile(r"[A-Za-z]+")
_HEADING_RE = re.compile(r"^#{1,6}\s+(.+)$")


# --- backend results ---


@dataclass(frozen=True)
class Completion:
    """Outcome of one backend call: the text, or the error that replaced it."""

    text: str = ""
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text.strip())


def choose_text(completion: Completion, fallback: str) -> str:
    """Use the backend text when the call succeeded, the placeholder otherwise."""
    return completion.text.strip() if completion.ok else fallback


# --- deterministic helpers ---


def strip_tags(markup: str) -> str:
    return _TAG_RE.sub(" ", markup)


def count_words(markup: str) -> int:
    """CJK characters plus latin words of the visible text."""
    text = strip_tags(markup)
    return len(_CJK_RE.findall(text)) + len(_LATIN_WORD_RE.findall(text))


def _matches_keyword(needle: str, haystack: str) -> bool:
    if _CJK_RE.search(needle):
        return needle in haystack
    return re.search(rf"(?<![a-z0-9]){re.escape(needle)}(?![a-z0-9])", haystack) is not None


def categorize(keyword: str) -> str:
    """First category whose keyword list matches, else "general"."""
    lowered = keyword.lower()
    for category, needles in CATEGORY_KEYWORDS.items():
        if any(_matches_keyword(n, lowered) for n in needles):
            return category
    return "general"


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        key = value.casefold()
        if value and key not in seen:
            seen.add(key)
            result.append(value)
    return result


def build_tags(keyword: str, category: str) -> list[str]:
    return _dedupe([keyword, category, *CATEGORY_TAGS.get(category, [])])[:MAX_TAGS]


def extract_keywords(markup: str, main_keyword: str, top_n: int = MAX_KEYWORDS) -> list[str]:
    """Most frequent body tokens, led by the topic keyword."""
    tokens = []
    for token in _TOKEN_RE.findall(strip_tags(markup)):
        token = token.strip("'-").lower()
        if len(token) >= 2 and token not in _STOP_WORDS:
            tokens.append(token)
    frequent = [word for word, _ in Counter(tokens).most_common(top_n)]
    return _dedupe([main_keyword, *frequent])[:MAX_KEYWORDS]


def slugify(title: str, max_length: int = SLUG_BASE_CHARS) -> str:
    """Transliterate accents away, keep CJK, lowercase and hyphenate."""
    text = unicodedata.normalize("NFKD", title)
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).lower()
    text = re.sub(r"[^\u4e00-\u9fa5a-z0-9\s-]", "", text)
    text = re.sub(r"[\s-]+", "-", text).strip("-")
    return text[:max_length].strip("-")


def to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def add_affiliate_links(markup: str) -> str:
    for name, link in PRODUCT_LINKS:
        markup = markup.replace(
            name, f'<a href="{link}" target="_blank" rel="nofollow">{name}</a>'
        )
    return markup


def format_content(raw: str, title: str) -> str:
    """Render backend text as article markup.

    Markdown headings and short lines ending with a colon become <h2>,
    blank lines separate paragraphs, bold markers are dropped.
    """
    blocks: list[str] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(f"<p>{escape(' '.join(paragraph))}</p>")
            paragraph.clear()

    for line in raw.replace("**", "").splitlines():
        stripped = line.strip()
        if not stripped:
            flush()
            continue
        heading = _HEADING_RE.match(stripped)
        if heading or (len(stripped) < 50 and stripped.endswith((":", "："))):
            flush()
            text = heading.group(1) if heading else stripped.rstrip(":：")
            blocks.append(f"<h2>{escape(text.strip())}</h2>")
            continue
        paragraph.append(stripped)
    flush()

    body = "\n".join(blocks)
    return f"<h1>{escape(title)}</h1>\n<article>\n{body}\n{CONTENT_END_MARKER}"


def clean_title(text: str) -> str:
    for line in text.splitlines():
        line = line.strip().strip("\"'“”‘’「」").strip()
        if line:
            return line.lstrip("#").strip()
    return ""


# --- prompts ---


def _title_prompt(topic_title: str) -> str:
    return f"""Write one engaging article title (8-14 words) for this topic: {topic_title}

Requirements:
- include a number or a concrete benefit
- spark curiosity
- search friendly
Return only the title."""


def _intro_prompt(title: str, keyword: str) -> str:
    return f"""Write an engaging introduction (150-250 words) for the article "{title}".
Keyword: {keyword}
State the reader's problem, promise a solution, keep the language natural."""


def _section_prompt(title: str, keyword: str, index: int) -> str:
    return f"""Write part {index} of the article (400-500 words).
Article title: {title}
Keyword: {keyword}
Use a subheading, give concrete methods or examples, use lists where helpful."""


def _conclusion_prompt(title: str) -> str:
    return f"""Write a closing paragraph (120-180 words) for the article "{title}".
Summarize the key points, give an action step, invite comments or shares."""


def _summary_prompt(content: str) -> str:
    return f"""Summarize the core of this article in under 60 words:
{content[:SUMMARY_SOURCE_CHARS]}
Be concise and keep the main points."""


# --- generator ---


class ContentGenerator:
    def __init__(
        self,
        client: GeminiClient,
        settings: Settings,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self._settings = settings
        self._rng = rng or random.Random()
        self._clock = clock
        self._last_stamp = 0

    def ask(self, prompt: str) -> Completion:
        try:
            return Completion(text=self._client.complete(prompt))
        except BackendUnavailable as exc:
            logger.debug("Backend not configured, using placeholder: %s", exc)
            return Completion(error=exc)
        except BackendError as exc:
            logger.warning("Backend call failed, using placeholder: %s", exc)
            return Completion(error=exc)

    def target_word_count(self) -> int:
        return self._rng.randint(self._settings.min_word_count, self._settings.max_word_count)

    def generate_title(self, topic: Topic) -> str:
        title = clean_title(choose_text(self.ask(_title_prompt(topic.title)), topic.title))
        return title or topic.title

    def generate_body(self, title: str, keyword: str, target_words: int) -> str:
        sections = math.ceil(target_words / WORDS_PER_SECTION)
        parts = [choose_text(self.ask(_intro_prompt(title, keyword)), FALLBACK_INTRO)]
        for index in range(1, sections + 1):
            parts.append(
                choose_text(self.ask(_section_prompt(title, keyword, index)), FALLBACK_SECTION)
            )
        parts.append(choose_text(self.ask(_conclusion_prompt(title)), FALLBACK_CONCLUSION))
        return format_content("\n\n".join(parts), title)

    def generate_summary(self, content: str) -> str:
        source = strip_tags(content)
        source = " ".join(source.split())
        return choose_text(self.ask(_summary_prompt(source)), FALLBACK_SUMMARY)

    def make_slug(self, title: str) -> str:
        """Slug from the title plus a base-36 millisecond stamp.

        The stamp strictly increases per generator, so titles that slugify
        identically still get distinct slugs.
        """
        stamp = int(self._clock().timestamp() * 1000)
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return f"{slugify(title) or 'article'}-{to_base36(stamp)}"

    def generate(self, topic: Topic) -> ArticleDraft:
        target = self.target_word_count()
        category = categorize(topic.keyword)

        title = self.generate_title(topic)
        body = self.generate_body(title, topic.keyword, target)
        summary = self.generate_summary(body)

        logger.info("Generated %r (target %d words, category %s)", title, target, category)

        try:
            return ArticleDraft(
                title=title,
                slug=self.make_slug(title),
                content=add_affiliate_links(body),
                summary=summary,
                category=category,
                tags=build_tags(topic.keyword, category),
                keywords=extract_keywords(body, topic.keyword),
                meta_title=title[:META_TITLE_CHARS],
                meta_description=summary[:META_DESCRIPTION_CHARS],
                image_url=None,
                source_url=topic.url,
                source_type=topic.source,
                word_count=count_words(body),
            )
        except ValidationError as exc:
            raise GenerationError(f"could not assemble article for topic {topic.id}") from exc
