import threading

import pytest

from nu_result_proxy.app import create_app
from nu_result_proxy.browser import FormPage
from nu_result_proxy.config import Settings

FORM_HTML = """
<html><body>
<form method="post" action="first_year_result_show.php">
  <input type="text" name="roll_number">
  <input type="text" name="reg_no">
  <input type="hidden" name="csrf_token" value="tok-123">
  <input type="hidden" name="letters_code" value="AB12">
</form>
</body></html>
"""

FORM_HTML_NO_LETTERS = """
<html><body>
<form method="post">
  <input type="hidden" name="csrf_token" value="tok-123">
</form>
</body></html>
"""

SESSION_COOKIES = [
    {"name": "PHPSESSID", "value": "sess-1", "domain": "results.nu.ac.bd", "path": "/"},
]


class FakeBrowser:
    """Stands in for ResultBrowser; records navigations and open sessions."""

    def __init__(self, html=FORM_HTML, ready=True, error=None, delay=0):
        self.html = html
        self.ready = ready
        self.error = error
        self.delay = delay
        self.visited = []
        self.open_sessions = 0
        self.sessions_opened = 0
        self._lock = threading.Lock()
        self._event = threading.Event()

    def load_form(self, form_url):
        with self._lock:
            self.visited.append(form_url)
            self.open_sessions += 1
            self.sessions_opened += 1
        try:
            if self.delay:
                self._event.wait(self.delay)
            if self.error is not None:
                raise self.error
            return FormPage(url=form_url, html=self.html, cookies=list(SESSION_COOKIES))
        finally:
            with self._lock:
                self.open_sessions -= 1


@pytest.fixture
def settings():
    return Settings(overrides={"results_base_url": "http://results.nu.ac.bd"}, environ={})


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def app(fake_browser, settings):
    app = create_app(fake_browser, settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
