from dataclasses import dataclass

from components.errors import TemplateNotFound

# Selectors accepted as "ok" on the create/share pages.
ALLOWED_SELECTORS = ("trai", "gai", "t", "g")

DEFAULT_TEMPLATE = "trai"
FONT_FILE = "font.ttf"
FONT_SIZE = 53
DARK_BLUE = (0, 0, 102, 255)


@dataclass(frozen=True)
class CardTemplate:
    template_id: str
    background_file: str
    font_file: str
    font_size: int
    fill: tuple
    center_x: int
    baseline_y: int


# Both artworks share the same name plate, so only the background differs.
TEMPLATES = {
    "gai": CardTemplate(
        template_id="gai",
        background_file="gai.jpg",
        font_file=FONT_FILE,
        font_size=FONT_SIZE,
        fill=DARK_BLUE,
        center_x=520,
        baseline_y=407,
    ),
    "trai": CardTemplate(
        template_id="trai",
        background_file="trai.jpg",
        font_file=FONT_FILE,
        font_size=FONT_SIZE,
        fill=DARK_BLUE,
        center_x=520,
        baseline_y=407,
    ),
}

# Prefix -> canonical template id. Anything unmatched falls back to DEFAULT_TEMPLATE.
ALIAS_PREFIXES = (
    ("g", "gai"),
)


def resolve_template(selector: str) -> str:
    """Map any selector string to a canonical template id.

    "g", "gai", "girl" all resolve to "gai"; every other string (including
    the empty one) resolves to "trai".
    """
    for prefix, template_id in ALIAS_PREFIXES:
        if selector.startswith(prefix):
            return template_id
    return DEFAULT_TEMPLATE


def get_template(template_id: str) -> CardTemplate:
    try:
        return TEMPLATES[template_id]
    except KeyError:
        raise TemplateNotFound(f"Unknown template: {template_id!r}") from None


def is_renderable(selector: str, text: str) -> bool:
    return selector in ALLOWED_SELECTORS and text != ""
