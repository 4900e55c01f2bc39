import logging
import sys
from typing import Optional

from flask import Flask, request
from flask_cors import CORS
from markupsafe import escape

from nu_result_proxy.browser import BrowserNotReady, ResultBrowser
from nu_result_proxy.config import Settings, load_settings
from nu_result_proxy.scraper import fetch_tokens, submit_and_fetch
from nu_result_proxy.urls import resolve

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("exam", "year", "roll", "reg", "examYear")

ALLOWED_METHODS = "POST, GET, OPTIONS"
ALLOWED_HEADERS = "Content-Type"

HOME_PAGE = """
<h2>NU Result Playwright Proxy</h2>
<p>Running for educational purposes.</p>
<code>POST /fetch with exam, year, roll, reg, examYear</code>
"""


def _text(body, status):
    return body, status, {"Content-Type": "text/plain; charset=utf-8"}


def create_app(browser, settings: Optional[Settings] = None) -> Flask:
    settings = settings or Settings()

    app = Flask(__name__)

    @app.before_request
    def short_circuit_options():
        # answered before routing, so unknown paths get 200 too
        if request.method == "OPTIONS":
            return "", 200

    @app.after_request
    def add_cors_headers(resp):
        # flask-cors only fills these in on preflight requests
        resp.headers.setdefault("Access-Control-Allow-Methods", ALLOWED_METHODS)
        resp.headers.setdefault("Access-Control-Allow-Headers", ALLOWED_HEADERS)
        return resp

    @app.route("/")
    def home():
        return HOME_PAGE

    @app.route("/fetch", methods=["POST"])
    def fetch_result():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _text("Missing required fields", 400)

        values = {}
        for name in REQUIRED_FIELDS:
            value = data.get(name)
            if value is None or isinstance(value, bool) or str(value).strip() == "":
                return _text("Missing required fields", 400)
            values[name] = str(value)

        urls = resolve(values["exam"], values["year"], base_url=settings.results_base_url)
        if not urls:
            return _text("Invalid exam or year", 400)

        if not browser.ready:
            return _text("Browser not ready", 500)

        try:
            form = fetch_tokens(browser, urls.form)
            if not form.complete:
                return _text("Failed to extract security tokens", 500)

            result_html = submit_and_fetch(
                urls.action,
                values["roll"],
                values["reg"],
                values["examYear"],
                form,
                user_agent=settings.user_agent,
                timeout=settings.submit_timeout,
            )
        except BrowserNotReady:
            return _text("Browser not ready", 500)
        except Exception as e:
            logger.exception(f"Error: {e}")
            body = f"<h3>Proxy Error</h3><p>{escape(str(e))}</p>"
            return body, 500, {"Content-Type": "text/html; charset=utf-8"}

        return result_html, 200, {"Content-Type": "text/html; charset=utf-8"}

    # registered last so its after_request hook runs before add_cors_headers
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=["POST", "GET", "OPTIONS"],
        allow_headers=[ALLOWED_HEADERS],
    )
    return app


def main():
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    browser = ResultBrowser(
        headless=settings.headless,
        user_agent=settings.user_agent,
        navigation_timeout_ms=settings.navigation_timeout_ms,
    )
    browser.start()

    app = create_app(browser, settings)
    logger.info(f"Server running on port {settings.port}")
    try:
        app.run(host=settings.host, port=settings.port, threaded=True)
    finally:
        browser.stop()


if __name__ == "__main__":
    main()
