import re
import unicodedata


def slugify(text: str, max_length: int = 100) -> str:
    """Lowercase ASCII slug: accents stripped, runs of other characters become '-'."""
    normalized = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug[:max_length].strip("-")


__all__ = ["slugify"]
