import datetime
import re
from typing import Iterable, List

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def slugify(text: str) -> str:
    slug = _NON_ALNUM.sub("-", text.lower()).strip("-")
    return slug or "post"


def dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
