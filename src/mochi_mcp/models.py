"""Pydantic models for tool inputs and Mochi entities.

Mochi uses hyphenated keys (and a trailing `?` for booleans) on the wire; the
models keep Python attribute names and expose the wire names as aliases.
Entity models document upstream payloads and are not enforced on responses.
"""

from enum import Enum
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SortBy(str, Enum):
    """Card sorting method on a deck page."""

    NONE = "none"
    LEXIGRAPHICALLY = "lexigraphically"  # legacy spelling still accepted upstream
    LEXICOGRAPHICALLY = "lexicographically"
    CREATED_AT = "created-at"
    UPDATED_AT = "updated-at"
    RETENTION_RATE_ASC = "retention-rate-asc"
    INTERVAL_LENGTH = "interval-length"


class CardsView(str, Enum):
    """Card display mode on a deck page."""

    LIST = "list"
    GRID = "grid"
    NOTE = "note"
    COLUMN = "column"


class TemplateFieldType(str, Enum):
    """Input type of a template field."""

    TEXT = "text"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DRAW = "draw"
    AI = "ai"
    SPEECH = "speech"
    IMAGE = "image"
    TRANSLATE = "translate"
    TRANSCRIPTION = "transcription"
    DICTIONARY = "dictionary"
    PINYIN = "pinyin"
    FURIGANA = "furigana"


class TextAlignment(str, Enum):
    """Text alignment of a template."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class WireModel(BaseModel):
    """Base for models sent to the API: strict keys, hyphenated aliases."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# Pagination


Bookmark = Annotated[
    str | None, Field(description="Pagination cursor from previous request")
]
Limit = Annotated[
    int | None, Field(ge=1, le=100, description="Items per page (1-100, default 10)")
]


class Page(BaseModel, Generic[T]):
    """One page of a paginated list response."""

    bookmark: str | None = None
    docs: list[T] = Field(default_factory=list)


class Timestamp(BaseModel):
    """Timestamp wrapper used by Mochi."""

    date: str


# Cards


class CardFieldValue(WireModel):
    """Value of one template field on a card."""

    id: str = Field(description="Field ID (should match the key)")
    value: str = Field(description="Field value")


CardFields = dict[str, CardFieldValue]


class CardReview(BaseModel):
    """A single review of a card."""

    date: Timestamp | None = None
    due: Timestamp | None = None
    remembered: bool | None = Field(default=None, alias="remembered?")


class Card(BaseModel):
    """A Mochi card as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    content: str
    name: str | None = None
    deck_id: str = Field(alias="deck-id")
    template_id: str | None = Field(default=None, alias="template-id")
    pos: str | None = None
    tags: list[str] | None = None
    manual_tags: list[str] | None = Field(default=None, alias="manual-tags")
    fields: CardFields | None = None
    references: list[str] | None = None
    reviews: list[CardReview] | None = None
    created_at: Timestamp | None = Field(default=None, alias="created-at")
    updated_at: Timestamp | None = Field(default=None, alias="updated-at")
    new: bool | None = Field(default=None, alias="new?")
    archived: bool | None = Field(default=None, alias="archived?")
    trashed: str | Timestamp | None = Field(default=None, alias="trashed?")
    attachments: dict[str, Any] | None = None


class DueCards(BaseModel):
    """Response of the due-cards endpoint."""

    cards: list[Card] = Field(default_factory=list)


# Decks


class Deck(BaseModel):
    """A Mochi deck as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    parent_id: str | None = Field(default=None, alias="parent-id")
    sort: float | None = None
    archived: bool | None = Field(default=None, alias="archived?")
    trashed: str | Timestamp | None = Field(default=None, alias="trashed?")
    sort_by: str | None = Field(default=None, alias="sort-by")
    cards_view: str | None = Field(default=None, alias="cards-view")
    show_sides: bool | None = Field(default=None, alias="show-sides?")
    sort_by_direction: bool | None = Field(default=None, alias="sort-by-direction")
    review_reverse: bool | None = Field(default=None, alias="review-reverse?")


# Templates


class TemplateFieldOptions(WireModel):
    """Field-specific options.

    Mochi adds options over time, so unknown keys are kept in `model_extra`
    and forwarded as-is.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    multi_line: bool | None = Field(
        default=None, alias="multi-line?", description="Allow multiple lines of text"
    )
    hide_term: bool | None = Field(
        default=None, alias="hide-term", description="Hide the term in review"
    )
    ai_task: str | None = Field(default=None, alias="ai-task", description="AI task description")


class TemplateField(WireModel):
    """Definition of one field in a template."""

    id: str = Field(description="Field ID (should match the key)")
    name: str | None = Field(default=None, description="Human-readable field name")
    type: TemplateFieldType | None = Field(default=None, description="Field input type")
    pos: str | None = Field(default=None, description="Relative position for sorting")
    content: str | None = Field(default=None, description="Default content or instructions")
    options: TemplateFieldOptions | None = Field(
        default=None, description="Field-specific options"
    )


TemplateFields = dict[str, TemplateField]


class TemplateStyle(WireModel):
    """Template styling options."""

    text_alignment: TextAlignment | None = Field(
        default=None, alias="text-alignment", description="Text alignment"
    )


class TemplateOptions(WireModel):
    """Template-level options."""

    show_sides_separately: bool | None = Field(
        default=None,
        alias="show-sides-separately?",
        description="Show template sides separately during review",
    )


class Template(BaseModel):
    """A Mochi template as returned by the API."""

    id: str
    name: str = Field(min_length=1, max_length=64)
    content: str
    pos: str | None = None
    fields: dict[str, Any] | None = None
    style: dict[str, Any] | None = None
    options: dict[str, Any] | None = None
