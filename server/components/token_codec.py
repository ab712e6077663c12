import base64
import binascii
import re

from components.errors import InvalidToken

SEPARATOR = "/"
IMAGE_SUFFIX = ".jpg"

# URL-safe alphabet with optional trailing padding; anything else is rejected
# up front since b64decode silently drops unknown characters.
_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def encode_token(template_id: str, text: str) -> str:
    payload = f"{template_id}{SEPARATOR}{text}".encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii")


def decode_token(token: str) -> tuple[str, str]:
    """
    Decode a share token back into (selector, text).
    Segments after the first are re-joined, so text may itself contain "/".
    """
    if not _TOKEN_RE.fullmatch(token):
        raise InvalidToken(f"Token has characters outside the URL-safe alphabet: {token!r}")
    try:
        decoded = base64.urlsafe_b64decode(token).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise InvalidToken(f"Malformed token {token!r}: {e}") from e

    parts = decoded.split(SEPARATOR)
    if len(parts) < 2:
        raise InvalidToken(f"Token {token!r} does not contain a template/text pair")

    return parts[0], SEPARATOR.join(parts[1:])


def strip_image_suffix(code: str) -> str:
    return code.removesuffix(IMAGE_SUFFIX)
