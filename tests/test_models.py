"""Tests for entity models and request body building."""

import pytest
from pydantic import ValidationError

from mochi_mcp.formatting import request_body
from mochi_mcp.models import (
    Card,
    Deck,
    DueCards,
    Page,
    SortBy,
    Template,
    TemplateField,
    TemplateFieldOptions,
)


class TestEntityModels:
    """Entity models accept payloads as the API returns them."""

    def test_card_wire_names(self):
        card = Card.model_validate(
            {
                "id": "c1",
                "content": "Q\n---\nA",
                "deck-id": "d1",
                "manual-tags": ["verbs"],
                "archived?": False,
                "created-at": {"date": "2026-01-01T00:00:00.000Z"},
                "reviews": [{"date": {"date": "2026-01-02"}, "remembered?": True}],
            }
        )

        assert card.deck_id == "d1"
        assert card.manual_tags == ["verbs"]
        assert card.created_at.date == "2026-01-01T00:00:00.000Z"
        assert card.reviews[0].remembered is True

    def test_card_page(self):
        page = Page[Card].model_validate(
            {"docs": [{"id": "c1", "content": "x", "deck-id": "d1"}], "bookmark": "next"}
        )

        assert page.bookmark == "next"
        assert page.docs[0].id == "c1"

    def test_deck_and_due_cards(self):
        deck = Deck.model_validate({"id": "d1", "name": "Spanish", "parent-id": "root"})
        due = DueCards.model_validate({"cards": [{"id": "c1", "content": "x", "deck-id": "d1"}]})

        assert deck.parent_id == "root"
        assert len(due.cards) == 1

    def test_template_name_length(self):
        with pytest.raises(ValidationError):
            Template.model_validate({"id": "t1", "name": "", "content": "c"})


class TestInputModels:
    def test_template_field_rejects_unknown_keys(self):
        with pytest.raises(ValidationError):
            TemplateField.model_validate({"id": "a", "colour": "red"})

    def test_field_options_keep_unknown_keys(self):
        options = TemplateFieldOptions.model_validate({"multi-line?": True, "new-thing": 1})

        assert options.multi_line is True
        assert options.model_extra == {"new-thing": 1}


class TestRequestBody:
    """Building API request bodies."""

    def test_drops_unset_fields(self):
        assert request_body(**{"name": "x", "parent-id": None, "archived?": False}) == {
            "name": "x",
            "archived?": False,
        }

    def test_enums_become_values(self):
        assert request_body(**{"sort-by": SortBy.CREATED_AT}) == {"sort-by": "created-at"}

    def test_nested_models_use_wire_names(self):
        fields = {
            "word": TemplateField(
                id="word", options=TemplateFieldOptions.model_validate({"multi-line?": True})
            )
        }

        assert request_body(fields=fields) == {
            "fields": {"word": {"id": "word", "options": {"multi-line?": True}}}
        }
