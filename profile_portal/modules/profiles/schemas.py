from enum import Enum
from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError, field_validator
from typing import Any

_http_url = TypeAdapter(HttpUrl)


def check_link(value: str) -> str:
    """Empty, or an absolute http(s) URL; anything else (javascript:, data:) is rejected"""
    if not value:
        return value
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be an http:// or https:// URL")
    return value


class SocialLinks(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    linkedin: str = ""
    twitter: str = ""
    github: str = ""

    @field_validator("linkedin", "twitter", "github", mode="before")
    @classmethod
    def none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("linkedin", "twitter", "github")
    @classmethod
    def http_links_only(cls, value: str) -> str:
        return check_link(value)


class Profile(BaseModel):
    """Form state of a profile; mirrors one row of the profiles table"""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = ""
    profession: str = ""
    phone: str = ""
    image_url: str = ""
    social_links: SocialLinks = SocialLinks()

    @field_validator("name", "profession", "phone", "image_url", mode="before")
    @classmethod
    def none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("image_url")
    @classmethod
    def http_image_only(cls, value: str) -> str:
        return check_link(value)

    @field_validator("social_links", mode="before")
    @classmethod
    def default_links(cls, value: Any) -> Any:
        return {} if value is None else value


class FieldPath(str, Enum):
    ROOT = "root"
    SOCIAL_LINKS = "social_links"


class FieldUpdate(BaseModel):
    """A single form change, tagged with where in the profile it lands"""

    model_config = ConfigDict(frozen=True)

    path: FieldPath
    key: str
    value: str
