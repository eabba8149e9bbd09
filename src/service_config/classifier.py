"""
Path classification for the configuration namespace.

A listed KV path is either a plain entry (`<root>ConfigMap/<name>`), a secret
entry (`<root>secrets/<name>`), or something else (directory nodes, nested
paths) that resolution skips.
"""

import re
from dataclasses import dataclass
from enum import Enum

NAMESPACE_PREFIX = "app_config_vars/serverless"

PLAIN_SECTION = "ConfigMap"
SECRET_SECTION = "secrets"


class KeyKind(Enum):
    """Kind of a listed namespace path."""

    PLAIN = "plain"
    SECRET = "secret"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class ClassifiedKey:
    """A listing entry tagged with its kind and logical config key name."""

    kind: KeyKind
    path: str
    name: str | None = None

    @property
    def matched(self) -> bool:
        return self.kind is not KeyKind.NO_MATCH


_SECTION_KINDS = {
    PLAIN_SECTION: KeyKind.PLAIN,
    SECRET_SECTION: KeyKind.SECRET,
}


def namespace_root(service: str, stage: str) -> str:
    """Return the trailing-slash-terminated namespace root for service and stage."""
    if not service:
        raise ValueError("service name must be a non-empty string")
    if not stage:
        raise ValueError("stage must be a non-empty string")
    return f"{NAMESPACE_PREFIX}/{service}.json/{stage}/"


def _pattern(root: str) -> re.Pattern[str]:
    if not root.endswith("/"):
        raise ValueError(f"namespace root must end with '/': {root!r}")
    sections = "|".join(_SECTION_KINDS)
    return re.compile(rf"^{re.escape(root)}({sections})/([^/]+)$")


def classify(root: str, full_path: str) -> ClassifiedKey:
    """Classify one listed path relative to the namespace root."""
    match = _pattern(root).match(full_path)
    if match is None:
        return ClassifiedKey(KeyKind.NO_MATCH, full_path)
    section, name = match.groups()
    return ClassifiedKey(_SECTION_KINDS[section], full_path, name)
