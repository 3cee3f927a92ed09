"""Tag setting parsing for `sql` / `orm` field metadata."""

from __future__ import annotations

from dataclasses import Field
from typing import Any, Dict

TAG_NAMESPACES = ("sql", "orm")
IGNORE_TAG = "-"


def parse_tag_setting(*tags: str) -> Dict[str, str]:
    """Parse `KEY` / `KEY:value` segments into an uppercase-keyed mapping.

    Segments are separated by `;`. Only the first `:` splits key from value, so
    values may contain colons. A segment without `:` maps the key to itself.
    Repeated keys, within one string or across strings, are joined with `:`:

        >>> parse_tag_setting("unique_index:a;unique_index:b")
        {'UNIQUE_INDEX': 'a:b'}
    """

    settings: Dict[str, str] = {}
    for tag in tags:
        if not tag:
            continue
        for segment in tag.split(";"):
            key, sep, value = segment.partition(":")
            key = key.strip().upper()
            if not key:
                continue
            _set_value(settings, key, value if sep else key)
    return settings


def field_tag_settings(field: Field[Any]) -> Dict[str, str]:
    """Merge the `sql` then `orm` tag strings of one dataclass field."""

    return parse_tag_setting(*(_raw_tag(field, namespace) for namespace in TAG_NAMESPACES))


def is_ignored_tag(field: Field[Any]) -> bool:
    return any(_raw_tag(field, namespace) == IGNORE_TAG for namespace in TAG_NAMESPACES)


def _raw_tag(field: Field[Any], namespace: str) -> str:
    raw = field.metadata.get(namespace)
    return raw if isinstance(raw, str) else ""


def _set_value(settings: Dict[str, str], key: str, value: str) -> None:
    existing = settings.get(key)
    settings[key] = value if existing is None else f"{existing}:{value}"
