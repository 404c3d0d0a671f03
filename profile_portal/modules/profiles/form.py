"""
Mapping between the HTML profile form and the Profile model.

Every input is described once in FORM_FIELDS; the tagged FieldUpdate it
produces is applied by a single rule in apply_field_change.
"""

from dataclasses import dataclass
from profile_portal.modules.profiles.schemas import FieldPath, FieldUpdate, Profile, SocialLinks
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class FormField:
    name: str
    path: FieldPath
    key: str
    input_type: str
    placeholder: str
    icon: str


FORM_FIELDS: List[FormField] = [
    FormField("name", FieldPath.ROOT, "name", "text", "Full Name", "user"),
    FormField("profession", FieldPath.ROOT, "profession", "text", "Profession", "briefcase"),
    FormField("phone", FieldPath.ROOT, "phone", "tel", "Phone Number", "phone"),
    FormField("image_url", FieldPath.ROOT, "image_url", "url", "Profile Image URL", "image"),
    FormField("social_linkedin", FieldPath.SOCIAL_LINKS, "linkedin", "url", "LinkedIn URL", "link"),
    FormField("social_twitter", FieldPath.SOCIAL_LINKS, "twitter", "url", "Twitter URL", "link"),
    FormField("social_github", FieldPath.SOCIAL_LINKS, "github", "url", "GitHub URL", "link"),
]

FIELDS_BY_NAME: Dict[str, FormField] = {f.name: f for f in FORM_FIELDS}

ROOT_KEYS = frozenset(k for k in Profile.model_fields if k != "social_links")
SOCIAL_KEYS = frozenset(SocialLinks.model_fields)


def apply_field_change(profile: Profile, update: FieldUpdate) -> Profile:
    """Return a copy of profile with exactly one field replaced"""
    if update.path is FieldPath.SOCIAL_LINKS:
        if update.key not in SOCIAL_KEYS:
            raise ValueError(f"Unknown social link: {update.key}")
        links = profile.social_links.model_copy(update={update.key: update.value})
        return profile.model_copy(update={"social_links": links})
    if update.key not in ROOT_KEYS:
        raise ValueError(f"Unknown profile field: {update.key}")
    return profile.model_copy(update={update.key: update.value})


def update_for_input(input_name: str, value: str) -> FieldUpdate:
    field = FIELDS_BY_NAME.get(input_name)
    if field is None:
        raise KeyError(input_name)
    return FieldUpdate(path=field.path, key=field.key, value=value)


def profile_from_form(form: Mapping[str, str], base: Profile = None) -> Profile:
    """Build form state from posted inputs; unknown inputs are ignored"""
    profile = base if base is not None else Profile()
    for name, value in form.items():
        if name in FIELDS_BY_NAME:
            profile = apply_field_change(profile, update_for_input(name, str(value)))
    return profile


def input_values(profile: Profile) -> Dict[str, str]:
    """Current value of every form input, keyed by input name"""
    values = {}
    for field in FORM_FIELDS:
        source = profile.social_links if field.path is FieldPath.SOCIAL_LINKS else profile
        values[field.name] = getattr(source, field.key)
    return values


def validate_profile(profile: Profile) -> Profile:
    """Re-run field validation; apply_field_change copies without validating"""
    return Profile.model_validate(profile.model_dump())
