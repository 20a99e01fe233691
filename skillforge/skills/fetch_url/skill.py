"""Fetch URL skill: downloads a page and returns the start of its body."""

import re

import httpx

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, define_skill

URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
MAX_BODY_LENGTH = 2000
FETCH_TIMEOUT_SECONDS = 10.0
USER_AGENT = "SkillForge/0.1"


def _is_textual(content_type: str) -> bool:
    return "text" in content_type or "json" in content_type


@define_skill(
    "fetch-url",
    "Fetch content from a URL and return a text summary",
    tags=["web", "http", "fetch"],
    keywords=["fetch", "url", "http", "get", "download", "webpage"],
)
async def fetch_url_skill(ctx: ExecutionContext) -> ExecutionOutcome:
    match = URL_RE.search(ctx.rawInput)
    if not match:
        return ExecutionOutcome(
            output="No URL found in input. Please include a valid URL (e.g. https://example.com)."
        )

    url = match.group(0)
    try:
        async with httpx.AsyncClient(
            timeout=FETCH_TIMEOUT_SECONDS,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        return ExecutionOutcome(output=f"Failed to fetch {url}: {exc}")

    if response.is_error:
        return ExecutionOutcome(
            output=f"HTTP {response.status_code} {response.reason_phrase} for {url}"
        )

    content_type = response.headers.get("content-type", "")
    if not _is_textual(content_type):
        return ExecutionOutcome(
            output=f"Fetched {url}: content-type {content_type} (binary content, not displayed)"
        )

    body = response.text
    if len(body) > MAX_BODY_LENGTH:
        body = body[:MAX_BODY_LENGTH] + "\n...(truncated)"
    return ExecutionOutcome(output=f"Fetched {url} ({response.status_code}):\n\n{body}")
