"""Article ID derivation."""

from typing import Any, Optional, Union


def derive_article_id(
    item: Union[dict, Any],
    guid_key: str = "guid",
    link_key: str = "link",
) -> Optional[str]:
    """
    Derive the stable article ID from an upstream feed item.

    Priority:
    1. guid
    2. link

    Args:
        item: Raw item dict or object with guid/link attributes
        guid_key: Key/attribute name for the guid
        link_key: Key/attribute name for the link

    Returns:
        The ID string, or None when the item carries neither value
    """
    if isinstance(item, dict):
        guid = item.get(guid_key)
        link = item.get(link_key)
    else:
        guid = getattr(item, guid_key, None)
        link = getattr(item, link_key, None)

    for candidate in (guid, link):
        if candidate is None:
            continue
        text = str(candidate).strip()
        if text:
            return text
    return None
