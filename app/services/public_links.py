from urllib.parse import urlencode

from app.core.config import settings
from app.models.opening import RecOpening


def build_apply_link(opening_id: str, source: str | None = None) -> str:
    params = {"opening": opening_id}
    if source:
        params["src"] = source
    base = (settings.public_app_origin or "").rstrip("/")
    path = f"/apply?{urlencode(params)}"
    return f"{base}{path}" if base else path


def build_share_links(opening: RecOpening) -> tuple[dict[str, str], str]:
    """Returns ({source: link}, generic_link) for an opening's preferred sources."""
    links: dict[str, str] = {}
    for source in opening.preferred_sources or []:
        name = str(source or "").strip()
        if name and name not in links:
            links[name] = build_apply_link(opening.opening_id, name)
    return links, build_apply_link(opening.opening_id)
