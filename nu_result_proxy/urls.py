from dataclasses import dataclass
from typing import Optional

BASE_URL = "http://results.nu.ac.bd"

# year key -> form page name; the action page is "<page>_show"
HONOURS_PAGES = {
    "1": "first_year_result",
    "2": "second_year_result",
    "3": "third_year_result",
    "4": "fourth_year_result",
    "consolidated": "final_year_result",
}

EXAM_PAGES = {
    "honours": HONOURS_PAGES,
}


@dataclass(frozen=True)
class ResultUrls:
    form: str
    action: str


def resolve(exam, year, base_url: str = BASE_URL) -> Optional[ResultUrls]:
    """Map an exam/year pair to its form and action URLs, or None if unknown."""
    if not isinstance(exam, str):
        return None

    pages = EXAM_PAGES.get(exam)
    if pages is None:
        return None

    page = pages.get(str(year))
    if not page:
        return None

    base = base_url.rstrip("/")
    return ResultUrls(
        form=f"{base}/{exam}/{page}.php",
        action=f"{base}/{exam}/{page}_show.php",
    )
