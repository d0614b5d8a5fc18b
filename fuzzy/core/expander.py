"""URL expansion: Target + dictionary → concrete request targets.

Fuzzable query parameters are rendered with the literal ``{fuzz}`` value,
which form-encodes to ``%7Bfuzz%7D``. Every dictionary value is then swapped
into that encoded token positionally, so the ordering of the expanded
sequence is always entry order × value order.
"""

import re
from typing import Iterator, List, Tuple
from urllib.parse import urlencode

import httpx

from fuzzy.core.errors import HeaderResolutionError, InvalidTemplateError
from fuzzy.core.models import FuzzDictionary, FuzzedUrl, FuzzInput, Target

FUZZ_TOKEN = "{fuzz}"
FUZZING_PLACEHOLDER = "%7Bfuzz%7D"

_CONTROL_CHARS = ("\r", "\n", "\0")
_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def join_url(host: str, base_path: str, endpoint: str) -> str:
    """Join host, base path and endpoint, skipping empty segments."""
    parts = [host.rstrip("/")]
    for segment in (base_path.strip("/"), endpoint.lstrip("/")):
        if segment:
            parts.append(segment)
    return "/".join(parts)


def build_url(target: Target, host: str, base_path: str) -> str:
    """
    Resolve a Target into its URL with the fuzz placeholder still in place.
    Raises InvalidTemplateError if the result is not an absolute http(s) URL.
    """
    endpoint = target.endpoint.replace(FUZZ_TOKEN, FUZZING_PLACEHOLDER)
    url = join_url(host, base_path, endpoint)

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidTemplateError(target.endpoint, url, str(exc)) from exc
    if parsed.scheme not in ("http", "https"):
        raise InvalidTemplateError(
            target.endpoint, url, "scheme must be http or https")
    if not parsed.host:
        raise InvalidTemplateError(target.endpoint, url, "missing host")

    params: List[Tuple[str, str]] = []
    for param in target.query_parameters:
        if param.fuzz:
            params.append((param.name, FUZZ_TOKEN))
        elif param.value is not None:
            params.append((param.name, param.value))

    if params:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}{urlencode(params)}"
    return url


def generate_fuzzed_urls(url: str, dictionary: FuzzDictionary) -> Iterator[FuzzedUrl]:
    for entry in dictionary.entries:
        for value in entry.values:
            yield FuzzedUrl(
                url=url.replace(FUZZING_PLACEHOLDER, value),
                description=entry.description,
                id=entry.id,
                value=value,
            )


def expand(target: Target, fuzz_input: FuzzInput,
           dictionary: FuzzDictionary) -> Iterator[FuzzedUrl]:
    """
    Expand one Target against the dictionary.

    The URL is built eagerly so a malformed template raises here, before
    anything is consumed; the concrete targets themselves are produced lazily.
    """
    url = build_url(target, fuzz_input.host, fuzz_input.base_path)
    return generate_fuzzed_urls(url, dictionary)


def resolve_headers(target: Target, fuzzed: FuzzedUrl) -> List[Tuple[str, str]]:
    """
    Request headers for one concrete target: fixed values as declared,
    fuzzable ones take the substituted dictionary value. Fixed headers
    without a value are left out.
    """
    headers: List[Tuple[str, str]] = []
    for header in target.headers:
        if not _HEADER_NAME.fullmatch(header.name):
            raise HeaderResolutionError(header.name, "name is not a valid header token")
        if header.fuzz:
            if fuzzed.value is None:
                raise HeaderResolutionError(
                    header.name, "fuzzable header has no substitution value")
            value = fuzzed.value
        elif header.value is None:
            continue
        else:
            value = header.value

        if any(c in value for c in _CONTROL_CHARS):
            raise HeaderResolutionError(header.name, "value contains control characters")
        if not value.isascii():
            raise HeaderResolutionError(header.name, "value is not ASCII")
        headers.append((header.name, value))
    return headers
