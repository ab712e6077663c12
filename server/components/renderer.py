import logging
import os
from functools import lru_cache
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from components.card_templates import CardTemplate
from components.errors import FontLoadError, RenderError, TemplateNotFound

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def load_font(font_path: str, font_size: int) -> ImageFont.FreeTypeFont:
    """Load a TrueType face once per (path, size); faces are read-only after load."""
    try:
        font = ImageFont.truetype(font_path, font_size)
    except OSError as e:
        raise FontLoadError(f"Could not load font {font_path}: {e}") from e
    logger.info("Loaded font %s at %spx", font_path, font_size)
    return font


def measure_text_width(text: str, font: ImageFont.FreeTypeFont) -> int:
    """Sum of per-character advances, rounded to whole pixels."""
    width = 0.0
    for char in text:
        width += font.getlength(char)
    return round(width)


def add_label(img: Image.Image, x: int, y: int, label: str, font: ImageFont.FreeTypeFont, fill: tuple):
    if not label:
        return
    draw = ImageDraw.Draw(img)
    # (x, y) is the left end of the baseline, not the top-left corner
    draw.text((x, y), label, font=font, fill=fill, anchor="ls")


def open_background(path: str) -> Image.Image:
    """Decode a background image into a fresh RGBA buffer of the same size."""
    try:
        with Image.open(path) as src:
            return src.convert("RGBA")
    except (FileNotFoundError, UnidentifiedImageError) as e:
        raise TemplateNotFound(f"Could not open template {path}: {e}") from e
    except OSError as e:
        raise TemplateNotFound(f"Could not decode template {path}: {e}") from e


def generate_invite(template: CardTemplate, text: str, asset_dir: str) -> Image.Image:
    """
    Draw `text` centred on the template's name plate.
    Returns the RGBA image; nothing is written to disk.
    """
    img = open_background(os.path.join(asset_dir, template.background_file))
    font = load_font(os.path.join(asset_dir, template.font_file), template.font_size)

    x = template.center_x - measure_text_width(text, font) // 2
    y = template.baseline_y

    add_label(img, x, y, text, font, template.fill)
    return img


def encode_jpeg(img: Image.Image) -> bytes:
    buf = BytesIO()
    try:
        # JPEG has no alpha channel; default quality (75)
        img.convert("RGB").save(buf, format="JPEG")
    except (OSError, ValueError) as e:
        raise RenderError(f"JPEG encoding failed: {e}") from e
    return buf.getvalue()


def render_invite(template: CardTemplate, text: str, asset_dir: str) -> bytes:
    return encode_jpeg(generate_invite(template, text, asset_dir))
