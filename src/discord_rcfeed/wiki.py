"""Static description of a wiki site, used to resolve titles and users.

This is the entity resolver used by the command line and tests. It knows the
site's URL layout and namespace names, which is all the formatter needs to
build links; it never contacts the wiki.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import quote

from discord_rcfeed.constants import NS_MAIN, NS_SPECIAL, NS_USER, NS_USER_TALK

DEFAULT_NAMESPACES: dict[int, str] = {
    -2: "Media",
    NS_SPECIAL: "Special",
    NS_MAIN: "",
    1: "Talk",
    NS_USER: "User",
    NS_USER_TALK: "User talk",
    4: "Project",
    5: "Project talk",
    6: "File",
    7: "File talk",
    8: "MediaWiki",
    9: "MediaWiki talk",
    10: "Template",
    11: "Template talk",
    12: "Help",
    13: "Help talk",
    14: "Category",
    15: "Category talk",
}

NAMESPACE_ALIASES: dict[str, int] = {
    "image": 6,
    "image talk": 7,
}

# Characters that may not appear in a page title
ILLEGAL_TITLE_CHARS = re.compile(r"[<>\[\]{}|\x00-\x1f\x7f]")
# Characters that may not appear in a user name, on top of the title ones
ILLEGAL_USER_CHARS = re.compile(r"[/@#]")

# Left unencoded in paths, matching the wiki's own URL encoding
URL_SAFE_CHARS = ";@$!*(),/~:"


def _normalize_spaces(text: str) -> str:
    return re.sub(r"[ _]+", " ", text).strip()


def _ucfirst(text: str) -> str:
    return text[:1].upper() + text[1:]


def _is_encodable(text: str) -> bool:
    """Return False for text that cannot appear in a URL, e.g. lone surrogates."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class SiteTitle:
    """A page title belonging to a Site."""

    site: Site
    namespace: int
    text: str

    @property
    def full_text(self) -> str:
        prefix = self.site.namespace_name(self.namespace)
        return f"{prefix}:{self.text}" if prefix else self.text

    @property
    def db_key(self) -> str:
        return self.full_text.replace(" ", "_")

    def full_url(self, query: str = "") -> str:
        key = quote(self.db_key, safe=URL_SAFE_CHARS)
        if not query:
            return self.site.server + self.site.article_path.replace("$1", key)
        return f"{self.site.server}{self.site.script_path}?title={key}&{query}"


@dataclass(frozen=True)
class SiteUser:
    """A registered or anonymous user of a Site."""

    site: Site
    name: str

    def user_page(self) -> SiteTitle:
        return SiteTitle(self.site, NS_USER, self.name)

    def talk_page(self) -> SiteTitle:
        return SiteTitle(self.site, NS_USER_TALK, self.name)


@dataclass(frozen=True)
class Site:
    """URL layout and namespace names of a wiki.

    Attributes:
        server: Scheme and host, e.g. "https://wiki.example.org".
        article_path: Path template for page views, "$1" is the page key.
        script_path: Path of the script handling query-string URLs.
        namespaces: Namespace id to canonical name.
    """

    server: str
    article_path: str = "/wiki/$1"
    script_path: str = "/w/index.php"
    namespaces: dict[int, str] = field(default_factory=lambda: dict(DEFAULT_NAMESPACES))

    def namespace_name(self, namespace: int) -> str:
        return self.namespaces.get(namespace, "")

    def _namespace_lookup(self, prefix: str) -> int | None:
        wanted = prefix.lower()
        for ns_id, name in self.namespaces.items():
            if name and name.lower() == wanted:
                return ns_id
        return NAMESPACE_ALIASES.get(wanted)

    def new_title(self, text: str) -> SiteTitle | None:
        """Parse title text into a SiteTitle.

        Returns None for empty titles and titles containing illegal or
        unencodable characters.
        """
        text = _normalize_spaces(text).lstrip(":").strip()
        # Fragments are not part of the page reference
        text = text.split("#", 1)[0].strip()
        if not text or ILLEGAL_TITLE_CHARS.search(text) or not _is_encodable(text):
            return None

        namespace = NS_MAIN
        if ":" in text:
            prefix, rest = text.split(":", 1)
            ns_id = self._namespace_lookup(prefix.strip())
            if ns_id is not None:
                namespace = ns_id
                text = rest.strip()
                if not text:
                    return None

        return SiteTitle(self, namespace, _ucfirst(text))

    def special_page(self, name: str, subpage: str = "") -> SiteTitle:
        text = f"{name}/{subpage}" if subpage else name
        return SiteTitle(self, NS_SPECIAL, _normalize_spaces(text))

    def new_user(self, name: str) -> SiteUser | None:
        """Return a SiteUser for a valid user name, else None."""
        name = _normalize_spaces(name)
        if (
            not name
            or ILLEGAL_TITLE_CHARS.search(name)
            or ILLEGAL_USER_CHARS.search(name)
            or not _is_encodable(name)
        ):
            return None
        return SiteUser(self, _ucfirst(name))
