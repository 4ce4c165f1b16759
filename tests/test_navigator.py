import unittest
from unittest.mock import patch

from playwright.sync_api import TimeoutError as PlaywrightTimeout

from reddit_vote import navigator
from reddit_vote.navigator import is_on_subreddit, subreddit_url

CONFIG = {
    "base_url": "https://old.reddit.com",
    "subreddit": "gaming",
    "step_screenshots": False,
}


class SubredditUrlTests(unittest.TestCase):
    def test_builds_listing_url(self) -> None:
        self.assertEqual(subreddit_url("https://old.reddit.com/", "gaming"),
                         "https://old.reddit.com/r/gaming/")
        self.assertEqual(subreddit_url("https://old.reddit.com", "/gaming/"),
                         "https://old.reddit.com/r/gaming/")

    def test_recognises_subreddit_pages(self) -> None:
        self.assertTrue(is_on_subreddit("https://old.reddit.com/r/gaming/", "gaming"))
        self.assertTrue(is_on_subreddit("https://old.reddit.com/r/Gaming/?count=25", "gaming"))
        self.assertTrue(is_on_subreddit("https://old.reddit.com/r/gaming", "gaming"))

    def test_rejects_other_pages(self) -> None:
        self.assertFalse(is_on_subreddit("https://old.reddit.com/r/gamingsuggestions/", "gaming"))
        self.assertFalse(is_on_subreddit("https://old.reddit.com/search?q=gaming", "gaming"))


class _StubLocator:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    @property
    def first(self):
        return self

    def fill(self, value):
        self.page.searched = value

    def click(self):
        if self.selector == navigator._SUBREDDIT_RESULT:
            self.page.url = self.page.result_url

    def wait_for(self, state=None, timeout=None):
        if self.selector == navigator._SUBREDDIT_RESULT and self.page.result_url is None:
            raise PlaywrightTimeout("no results")


class _StubSearchPage:
    def __init__(self, *, search_bar=True, result_url=None, redirect_to=None):
        self.search_bar = search_bar
        self.result_url = result_url
        self.redirect_to = redirect_to
        self.searched = None
        self.visited = []
        self.url = "https://old.reddit.com/"

    def wait_for_selector(self, selector, state=None, timeout=None):
        if selector == navigator._SEARCH_INPUT and not self.search_bar:
            raise PlaywrightTimeout("no search bar")

    def wait_for_load_state(self, state=None, timeout=None):
        pass

    def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        self.url = self.redirect_to or url

    def locator(self, selector):
        return _StubLocator(self, selector)


class OpenSubredditTests(unittest.TestCase):
    def test_search_result_is_followed(self) -> None:
        page = _StubSearchPage(result_url="https://old.reddit.com/r/gaming/")
        navigator.open_subreddit(page, dict(CONFIG))
        self.assertEqual(page.searched, "gaming")
        self.assertEqual(page.visited, [])
        self.assertEqual(page.url, "https://old.reddit.com/r/gaming/")

    def test_missing_search_bar_falls_back_to_direct_url(self) -> None:
        page = _StubSearchPage(search_bar=False)
        navigator.open_subreddit(page, dict(CONFIG))
        self.assertIsNone(page.searched)
        self.assertEqual(page.visited, ["https://old.reddit.com/r/gaming/"])

    def test_wrong_search_hit_falls_back_to_direct_url(self) -> None:
        page = _StubSearchPage(result_url="https://old.reddit.com/r/gamingsuggestions/")
        navigator.open_subreddit(page, dict(CONFIG))
        self.assertEqual(page.visited, ["https://old.reddit.com/r/gaming/"])
        self.assertEqual(page.url, "https://old.reddit.com/r/gaming/")

    def test_empty_search_results_fall_back_to_direct_url(self) -> None:
        page = _StubSearchPage()
        with patch.object(navigator, "capture_diagnostics") as diag:
            navigator.open_subreddit(page, dict(CONFIG))
        diag.assert_called_once_with(page, "subreddit_search_no_result")
        self.assertEqual(page.visited, ["https://old.reddit.com/r/gaming/"])

    def test_redirect_away_from_subreddit_raises(self) -> None:
        page = _StubSearchPage(search_bar=False, redirect_to="https://old.reddit.com/subreddits/search")
        with patch.object(navigator, "capture_diagnostics") as diag:
            with self.assertRaises(RuntimeError):
                navigator.open_subreddit(page, dict(CONFIG))
        diag.assert_called_once_with(page, "subreddit_url_mismatch")


if __name__ == "__main__":
    unittest.main()
