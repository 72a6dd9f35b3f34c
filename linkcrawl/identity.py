"""Resource identity helpers: canonical keys, resolution and classification."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urljoin, urlsplit, urlunsplit

# Schemes the default access layer knows how to retrieve
RETRIEVABLE_SCHEMES: frozenset[str] = frozenset(("http", "https", "file"))


def canonicalize(url: str) -> str:
    """Return the resource key for *url*: everything before the first ``#``."""
    return url.partition("#")[0]


def get_fragment(url: str) -> str:
    """Return the fragment of *url* without the ``#`` (empty if absent)."""
    return url.partition("#")[2]


def _remove_dot_segments(path: str) -> str:
    if "." not in path:
        return path
    segments = path.split("/")
    output: list[str] = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            # never pop the empty segment before the leading "/"
            if len(output) > 1:
                output.pop()
            continue
        output.append(segment)
    if segments[-1] in (".", ".."):
        output.append("")
    return "/".join(output)


def normalize_url(url: str) -> str:
    """Normalize an absolute URL of a retrievable scheme.

    Scheme and host are lowercased, ``.`` and ``..`` path segments are
    removed and an empty http(s) path becomes ``/``. Other URLs (``mailto:``
    and the like) are returned unchanged.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in RETRIEVABLE_SCHEMES:
        return url

    userinfo, at, host = parts.netloc.rpartition("@")
    netloc = userinfo + at + host.lower()
    path = _remove_dot_segments(parts.path)
    if scheme in ("http", "https") and not path:
        path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def resolve(base: str, reference: str) -> str:
    """Resolve *reference* against the absolute URL *base*.

    Absolute references are normalized like relative ones, so
    ``https://h/x/../a.html`` and ``a.html`` (against ``https://h/``) name
    the same resource.
    """
    return normalize_url(urljoin(base, reference.strip()))


def is_internal(url: str, base: str) -> bool:
    """Check whether *url* lies under *base*.

    This is a plain string prefix test, so a base of ``/site`` also matches
    ``/site-2/page.html``.
    """
    return url.startswith(base)


def is_retrievable(url: str) -> bool:
    """Check whether the scheme of *url* can be fetched."""
    return urlsplit(url).scheme.lower() in RETRIEVABLE_SCHEMES


def normalize_entry_point(url: str) -> str:
    """Canonical key for an entry point; bare hosts get a ``/`` path."""
    return normalize_url(canonicalize(url))


def get_base_from_url(url: str) -> str:
    """Derive the default base (parent directory) of an entry point."""
    parts = urlsplit(normalize_entry_point(url))
    path = parts.path or "/"
    parent = path[: path.rfind("/") + 1]
    return urlunsplit((parts.scheme, parts.netloc, parent, "", ""))


def to_url(path_or_url: str) -> str:
    """Convert a CLI argument into an absolute URL.

    Anything with a scheme longer than one character is taken as a URL (a
    single letter is a Windows drive). Local paths become ``file:`` URLs and
    directories keep a trailing slash.
    """
    scheme = urlsplit(path_or_url).scheme
    if len(scheme) > 1:
        return path_or_url

    path = Path(path_or_url).expanduser().resolve()
    url = path.as_uri()
    if path.is_dir() and not url.endswith("/"):
        url += "/"
    return url
