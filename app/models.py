"""Pydantic request/response models."""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BudgetOption = Literal["budget-friendly", "standard", "luxury"]


class _Toggles(BaseModel):
    """A brief section: ``enabled`` plus one flag per subsection."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    enabled: bool = True

    def subsections(self) -> list[str]:
        return [name for name, on in self if name != "enabled" and on]


class TransportationToggles(_Toggles):
    public_transit: bool = True
    alternatives: bool = True
    airport: bool = True


class AttractionsToggles(_Toggles):
    museums: bool = True
    landmarks: bool = True
    viewpoints: bool = True
    experiences: bool = True


class FoodAndDrinkToggles(_Toggles):
    restaurants: bool = True
    street_food: bool = True
    bars: bool = True
    cafes: bool = True


class NeighborhoodsToggles(_Toggles):
    layout: bool = True
    where_to_stay: bool = True
    character: bool = True


class CultureAndEventsToggles(_Toggles):
    events: bool = True
    sports_events: bool = True
    customs: bool = True
    language: bool = True


class DayTripsToggles(_Toggles):
    nearby_destinations: bool = True
    transportation: bool = True
    duration: bool = True


class ActiveAndSportsToggles(_Toggles):
    running: bool = True
    cycling: bool = True
    sports: bool = True
    outdoor_activities: bool = True
    climbing_gyms: bool = False


class PracticalToggles(_Toggles):
    currency: bool = True
    safety: bool = True
    local_news: bool = True


class CategoryOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    transportation: TransportationToggles = Field(default_factory=TransportationToggles)
    attractions: AttractionsToggles = Field(default_factory=AttractionsToggles)
    food_and_drink: FoodAndDrinkToggles = Field(default_factory=FoodAndDrinkToggles)
    neighborhoods: NeighborhoodsToggles = Field(default_factory=NeighborhoodsToggles)
    culture_and_events: CultureAndEventsToggles = Field(default_factory=CultureAndEventsToggles)
    day_trips: DayTripsToggles = Field(default_factory=DayTripsToggles)
    active_and_sports: ActiveAndSportsToggles = Field(default_factory=ActiveAndSportsToggles)
    practical: PracticalToggles = Field(default_factory=PracticalToggles)

    def with_section(self, name: str, enabled: bool) -> "CategoryOptions":
        """Return a copy with section ``name`` and all of its subsections switched on or off."""
        if name not in type(self).model_fields:
            raise KeyError(name)
        section = getattr(self, name)
        flags = {field: enabled for field in type(section).model_fields}
        return self.model_copy(update={name: section.model_copy(update=flags)})

    def enabled_sections(self) -> dict[str, list[str]]:
        return {name: section.subsections() for name, section in self if section.enabled}


class BriefRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    destination: str = Field(..., min_length=1, max_length=200)
    start_date: str | None = Field(default=None, max_length=40)
    end_date: str | None = Field(default=None, max_length=40)
    travel_month: str | None = Field(default=None, max_length=20)
    budget: BudgetOption = "standard"
    categories: CategoryOptions = Field(default_factory=CategoryOptions)


class BriefResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    structured_data: dict[str, Any]
    destination: str
    start_date: str | None
    end_date: str | None
    travel_month: str | None = None
