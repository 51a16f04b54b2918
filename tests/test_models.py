"""Tests for Pydantic request/response models."""
import pytest
from pydantic import ValidationError

from app.models import BriefRequest, BriefResponse, CategoryOptions


class TestBriefRequest:
    def test_valid_minimal(self):
        r = BriefRequest(destination="Lisbon")
        assert r.destination == "Lisbon"
        assert r.budget == "standard"
        assert r.start_date is None
        assert r.categories.transportation.enabled is True

    def test_camel_case_payload(self):
        r = BriefRequest.model_validate({
            "destination": "Lisbon",
            "startDate": "2026-05-01",
            "endDate": "2026-05-07",
            "budget": "luxury",
            "categories": {"foodAndDrink": {"enabled": False}},
        })
        assert r.start_date == "2026-05-01"
        assert r.budget == "luxury"
        assert r.categories.food_and_drink.enabled is False

    def test_empty_destination_rejected(self):
        with pytest.raises(ValidationError):
            BriefRequest(destination="")

    def test_missing_destination_rejected(self):
        with pytest.raises(ValidationError):
            BriefRequest.model_validate({})

    def test_unknown_budget_rejected(self):
        with pytest.raises(ValidationError):
            BriefRequest(destination="Lisbon", budget="backpacker")


class TestCategoryOptions:
    def test_with_section_disables_whole_subtree(self):
        opts = CategoryOptions().with_section("food_and_drink", False)
        section = opts.food_and_drink
        assert section.enabled is False
        assert not any([section.restaurants, section.street_food, section.bars, section.cafes])

    def test_with_section_enables_whole_subtree(self):
        opts = CategoryOptions.model_validate(
            {"practical": {"enabled": False, "currency": False, "safety": False, "localNews": False}}
        )
        opts = opts.with_section("practical", True)
        assert opts.practical.enabled is True
        assert opts.practical.subsections() == ["currency", "safety", "local_news"]

    def test_with_section_returns_copy(self):
        original = CategoryOptions()
        original.with_section("attractions", False)
        assert original.attractions.enabled is True

    def test_with_section_leaves_other_sections(self):
        opts = CategoryOptions().with_section("day_trips", False)
        assert opts.attractions.enabled is True
        assert opts.attractions.museums is True

    def test_with_section_unknown_name(self):
        with pytest.raises(KeyError):
            CategoryOptions().with_section("nightlife", True)

    def test_enabled_sections_skips_disabled(self):
        opts = CategoryOptions().with_section("neighborhoods", False)
        sections = opts.enabled_sections()
        assert "neighborhoods" not in sections
        assert sections["transportation"] == ["public_transit", "alternatives", "airport"]


def test_brief_response_serializes_camel_case():
    resp = BriefResponse(
        structured_data={"destination": "Lisbon"},
        destination="Lisbon",
        start_date=None,
        end_date="2026-05-07",
    )
    assert resp.model_dump(by_alias=True) == {
        "structuredData": {"destination": "Lisbon"},
        "destination": "Lisbon",
        "startDate": None,
        "endDate": "2026-05-07",
        "travelMonth": None,
    }


class TestTravelMonth:
    def test_travel_month_from_camel_case(self):
        r = BriefRequest.model_validate({"destination": "Lisbon", "travelMonth": "May"})
        assert r.travel_month == "May"
        assert r.model_dump(by_alias=True)["travelMonth"] == "May"

    def test_travel_month_optional(self):
        assert BriefRequest(destination="Lisbon").travel_month is None

    def test_travel_month_too_long_rejected(self):
        with pytest.raises(ValidationError):
            BriefRequest(destination="Lisbon", travel_month="x" * 21)


class TestClimbingGyms:
    def test_climbing_gyms_is_opt_in(self):
        opts = CategoryOptions()
        assert opts.active_and_sports.climbing_gyms is False
        assert "climbing_gyms" not in opts.enabled_sections()["active_and_sports"]

    def test_climbing_gyms_from_camel_case(self):
        opts = CategoryOptions.model_validate({"activeAndSports": {"climbingGyms": True}})
        assert opts.active_and_sports.climbing_gyms is True
        assert opts.enabled_sections()["active_and_sports"][-1] == "climbing_gyms"

    def test_enabling_section_enables_climbing_gyms(self):
        opts = CategoryOptions().with_section("active_and_sports", True)
        assert opts.active_and_sports.climbing_gyms is True
