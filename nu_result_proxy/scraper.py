import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup

from nu_result_proxy.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

TOKEN_FIELDS = ("csrf_token", "letters_code")


@dataclass
class TokenPair:
    csrf_token: Optional[str] = None
    letters_code: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.csrf_token) and bool(self.letters_code)


@dataclass
class FormTokens:
    """Tokens scraped from a form page plus the cookies set while loading it."""

    tokens: TokenPair
    form_url: str
    cookies: List[Dict] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.tokens.complete


def extract_tokens(html: str) -> TokenPair:
    soup = BeautifulSoup(html or "", "html.parser")

    values = {}
    for name in TOKEN_FIELDS:
        tag = soup.find("input", attrs={"name": name})
        values[name] = tag.get("value") if tag else None

    return TokenPair(**values)


def fetch_tokens(browser, form_url: str) -> FormTokens:
    """Load the form page in a fresh browser session and read its anti-forgery tokens."""
    form_page = browser.load_form(form_url)
    tokens = extract_tokens(form_page.html)

    if not tokens.complete:
        missing = [name for name in TOKEN_FIELDS if not getattr(tokens, name)]
        logger.warning(f"Missing {', '.join(missing)} on {form_url}")

    return FormTokens(tokens=tokens, form_url=form_url, cookies=form_page.cookies)


def build_form_data(roll, reg, exam_year, tokens: TokenPair) -> Dict[str, str]:
    return {
        "roll_number": roll,
        "reg_no": reg,
        "exam_year": exam_year,
        "csrf_token": tokens.csrf_token,
        "letters_code": tokens.letters_code,
    }


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def submit_and_fetch(
    action_url: str,
    roll,
    reg,
    exam_year,
    form: FormTokens,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 30,
) -> str:
    """
    POST the completed form to the action page and return the body as-is.

    Cookies captured while loading the form page are sent along, so the remote
    site sees the same session that issued the tokens.
    """
    headers = {
        "User-Agent": user_agent,
        "Referer": form.form_url,
        "Origin": _origin(form.form_url),
    }
    data = build_form_data(roll, reg, exam_year, form.tokens)

    with requests.Session() as session:
        for cookie in form.cookies:
            session.cookies.set(
                cookie["name"],
                cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
            )

        res = session.post(action_url, data=data, headers=headers, timeout=timeout)

    logger.info(f"Submitted {action_url} -> HTTP {res.status_code}")
    return res.text
