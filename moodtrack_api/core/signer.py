"""Last.fm API request signing."""

import hashlib
from collections.abc import Mapping

# Parameters Last.fm leaves out of the signature base string
UNSIGNED_PARAMS = frozenset({"api_sig", "format", "callback"})


def build_signature_base(params: Mapping[str, str], secret: str) -> str:
    """Concatenate sorted name/value pairs followed by the shared secret."""
    names = sorted(
        (name for name in params if name not in UNSIGNED_PARAMS),
        key=lambda name: name.encode("utf-8"),
    )
    return "".join(f"{name}{params[name]}" for name in names) + secret


def sign_request(params: Mapping[str, str], secret: str) -> str:
    """Compute the ``api_sig`` value for a Last.fm call.

    Names are ordered by their UTF-8 bytes, each name is immediately followed by its
    value with no separator, the shared secret is appended, and the result is the
    lowercase hex MD5 digest of that string.

    Args:
        params: Call parameters, excluding the secret itself
        secret: Shared API secret

    Returns:
        32 character lowercase hexadecimal signature
    """
    base = build_signature_base(params, secret)
    return hashlib.md5(base.encode("utf-8")).hexdigest()  # nosec B324 - mandated by Last.fm
