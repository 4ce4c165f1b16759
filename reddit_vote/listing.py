"""
Listing module: the page collaborator for the vote pipeline.

ListingPage wraps a Playwright Page showing an old.reddit.com listing and
exposes the three calls the core needs:

    snapshot()                  → list[RawItemDescriptor]  (one read of every div.thing)
    inspect(stable_id)          → VoteProbe                (arrows + upmod/downmod markers)
    activate(stable_id, action) → clicks one arrow

All markup knowledge (selectors, class names, data-* attributes) lives here
so a layout change on reddit's side only touches this file.
"""

import logging
from playwright.sync_api import Page

from reddit_vote.models import DesiredAction, RawItemDescriptor, VoteProbe

logger = logging.getLogger("reddit_vote")

# `thing` is the wrapper class old reddit puts on every post/ad/comment.
THING_SELECTOR = "div.thing"
# Active arrows lose the plain up/down class (they become upmod/downmod),
# so match any arrow whose class mentions the direction.
UP_ARROW = ".arrow.up, .arrow[class*='up']"
DOWN_ARROW = ".arrow.down, .arrow[class*='down']"
ACTIVE_UP_CLASS = "upmod"
ACTIVE_DOWN_CLASS = "downmod"
HTML_EXCERPT_CHARS = 500

_JS_SNAPSHOT = """
(thingSelector) => Array.from(document.querySelectorAll(thingSelector)).map(thing => {
    const titleEl = thing.querySelector('a.title');
    return {
        className: thing.className || '',
        dataPromoted: thing.getAttribute('data-promoted'),
        title: titleEl ? (titleEl.textContent || '') : '',
        fullname: thing.getAttribute('data-fullname'),
        permalink: thing.getAttribute('data-permalink'),
    };
})
"""

_JS_INSPECT = """
([selector, upSel, downSel, upActive, downActive, excerpt]) => {
    const thing = document.querySelector(selector);
    if (!thing) return { found: false };
    thing.scrollIntoView({ block: 'center' });
    const up = thing.querySelector(upSel);
    const down = thing.querySelector(downSel);
    return {
        found: true,
        upFound: !!up,
        downFound: !!down,
        upActive: !!up && up.classList.contains(upActive),
        downActive: !!down && down.classList.contains(downActive),
        html: (up && down) ? '' : thing.innerHTML.substring(0, excerpt),
    };
}
"""


def _is_promoted_attr(value) -> bool:
    # data-promoted="false" is rendered on ordinary posts
    if value is None:
        return False
    return str(value).strip().lower() not in ("", "false")


def descriptor_from_attrs(attrs: dict) -> RawItemDescriptor:
    """Turn one raw attribute dict from _JS_SNAPSHOT into a RawItemDescriptor."""
    classes = (attrs.get("className") or "").lower()
    return RawItemDescriptor(
        title=(attrs.get("title") or "").strip(),
        stable_id=attrs.get("fullname") or None,
        permalink=attrs.get("permalink") or None,
        pinned="stickied" in classes,
        promoted="promoted" in classes or _is_promoted_attr(attrs.get("dataPromoted")),
    )


def thing_selector(stable_id: str) -> str:
    return f'{THING_SELECTOR}[data-fullname="{stable_id}"]'


class ListingPage:
    """Page collaborator over a live old-reddit listing."""

    def __init__(self, page: Page):
        self.page = page

    def snapshot(self) -> list[RawItemDescriptor]:
        rows = self.page.evaluate(_JS_SNAPSHOT, THING_SELECTOR) or []
        items = [descriptor_from_attrs(row) for row in rows]
        logger.debug(f"  Listing snapshot: {len(items)} things")
        return items

    def inspect(self, stable_id: str) -> VoteProbe:
        payload = self.page.evaluate(
            _JS_INSPECT,
            [thing_selector(stable_id), UP_ARROW, DOWN_ARROW,
             ACTIVE_UP_CLASS, ACTIVE_DOWN_CLASS, HTML_EXCERPT_CHARS],
        )
        return VoteProbe.from_dict(payload or {})

    def activate(self, stable_id: str, action: DesiredAction) -> None:
        arrow = UP_ARROW if action is DesiredAction.ASSERT_POSITIVE else DOWN_ARROW
        logger.debug(f"  Clicking {action.value} arrow on {stable_id}")
        self.page.locator(thing_selector(stable_id)).locator(arrow).first.click()
