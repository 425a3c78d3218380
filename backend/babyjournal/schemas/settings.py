"""
BabyJournal Backend — Visual and Site Settings Schemas
=======================================================
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VisualConfig(BaseModel):
    """
    A user's theme. Every field is optional; a user who never saved a theme
    gets an object with every field null.
    """
    primary_color: Optional[str] = Field(default=None, max_length=32)
    secondary_color: Optional[str] = Field(default=None, max_length=32)
    accent_color: Optional[str] = Field(default=None, max_length=32)
    background_color: Optional[str] = Field(default=None, max_length=32)
    card_color: Optional[str] = Field(default=None, max_length=32)
    text_color: Optional[str] = Field(default=None, max_length=32)
    light_text_color: Optional[str] = Field(default=None, max_length=32)
    border_color: Optional[str] = Field(default=None, max_length=32)
    main_font: Optional[str] = Field(default=None, max_length=120)
    font_size: Optional[str] = Field(default=None, max_length=16)

    model_config = {"from_attributes": True}


class SiteSettings(BaseModel):
    site_name: str = Field(min_length=1, max_length=120)
    allow_new_registrations: bool

    model_config = {"from_attributes": True}

    @field_validator("site_name")
    @classmethod
    def strip_site_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Site name must not be blank")
        return v
