class InviteError(Exception):
    """Base class for anything that stops an invite card from being served."""


class TemplateNotFound(InviteError):
    """Background image is unknown, missing, or not decodable."""


class FontLoadError(InviteError):
    """Font file is missing or malformed."""


class InvalidToken(InviteError):
    """Share token is not URL-safe base64 or lacks a template/text split."""


class RenderError(InviteError):
    """Drawing or JPEG encoding failed."""
