import re

SLUG_RE = re.compile(r"[a-z0-9-]+")


def slugify(text):
    """
    Convert a record name to a URL-friendly slug.
    Apostrophes are dropped so "Joe's Place" becomes "joes-place".
    """
    if not text:
        return ""
    text = text.lower().strip()
    text = re.sub(r"['‘’`]", "", text)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def ensure_unique_slug(existing_slugs, base_slug, exclude_slug=None):
    """
    Append -1, -2, ... to base_slug until it no longer collides.
    exclude_slug is the record's own current slug, which never counts as a collision.
    """
    taken = {s for s in existing_slugs if s and s != exclude_slug}
    if base_slug not in taken:
        return base_slug

    counter = 1
    while f"{base_slug}-{counter}" in taken:
        counter += 1
    return f"{base_slug}-{counter}"


def is_valid_slug(slug):
    if not slug:
        return False
    return bool(SLUG_RE.fullmatch(slug)) and not slug.startswith("-") and not slug.endswith("-")
