"""Pydantic models for request validation and serialization."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

ADOPTION_MODES = ("Adopt", "Foster")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Elasticsearch document ids: URL-safe, at most 512 bytes
RECORD_ID_PATTERN = r"^[A-Za-z0-9_-]{1,512}$"


class Species(BaseModel):
    """Species descriptor embedded in every animal record."""

    species_name: str = Field(min_length=1, description="e.g. 'Dog' or 'Cat'")
    breed: str = Field(min_length=1, description="Breed name")


class CaretakerInput(BaseModel):
    """Caretaker details supplied on creation, before identity resolution."""

    caretaker_name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)


class CaretakerRef(BaseModel):
    """Caretaker embedded in a persisted animal record.

    The identifier is stable per distinct (case-insensitive) email. It is
    exposed as ``_id`` over HTTP and stored as ``id`` because Elasticsearch
    reserves ``_id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id", min_length=1, description="Caretaker identity")
    caretaker_name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)


class AnimalFields(BaseModel):
    """Mutable fields shared by create, update and stored records."""

    name: str = Field(min_length=1)
    img_url: str = Field(default="", description="Image reference")
    gender: str = Field(min_length=1)
    date_of_birth: date
    species: Species
    status_tags: list[str] = Field(
        default_factory=list,
        description=(
            "Free-form classification labels. Stored in canonical form: "
            "upper-cased, stripped and de-duplicated"
        ),
    )
    description: str = Field(default="")
    adopt_foster: str = Field(description="'Adopt' or 'Foster'")

    @field_validator("status_tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str]) -> list[str]:
        normalized: list[str] = []
        for tag in tags:
            value = tag.strip().upper()
            if value and value not in normalized:
                normalized.append(value)
        return normalized

    @field_validator("adopt_foster")
    @classmethod
    def _normalize_adopt_foster(cls, value: str) -> str:
        canonical = value.strip().capitalize()
        if canonical not in ADOPTION_MODES:
            raise ValueError(f"adopt_foster must be one of {', '.join(ADOPTION_MODES)}")
        return canonical


class AnimalCreate(AnimalFields):
    """Body of a create request."""

    current_caretaker: CaretakerInput


class AnimalUpdate(AnimalFields):
    """Body of an update request: the full mutable field set."""

    current_caretaker: CaretakerRef


class AnimalRecord(AnimalFields):
    """A persisted adoptable animal."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id", description="Store-assigned identifier")
    current_caretaker: CaretakerRef

    @classmethod
    def from_document(cls, record_id: str, source: dict) -> AnimalRecord:
        """Build a record from a stored document body and its id."""
        return cls(id=record_id, **source)


class MutationResponse(BaseModel):
    """Confirmation returned by create, update and delete."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    id: str = Field(alias="_id")


class HealthResponse(BaseModel):
    """Service health as reported by ``/health``."""

    status: str
    elasticsearch: str
