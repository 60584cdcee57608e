from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from presley_site.fields import FieldSet, FormField, bind
from presley_site.forms import IMAGE_EXTENSIONS, MUSIC_FIRST_FIELDS, MUSIC_SECOND_FIELDS
from presley_site.validation import FormValidator, error_label_ids

HIDDEN = "hidden"
VISIBLE = "visible"

NEXT_LABEL = "Dalje"
SUBMIT_LABEL = "Pošalji"

# Name of the hidden field that round-trips the second fieldset's visibility.
VISIBILITY_FIELD = "secondFieldset"

RELEASE_DATETIME_RE = re.compile(r"[0-3]\d\.[0-1]\d\.\d{4}. [0-2]\d:[0-5]\d:[0-5]\d")
# Shorter than 100 or longer than 1000 characters, quotes, angle brackets or "..".
INVALID_SONGS_RE = re.compile(r"\A[\s\S]{0,99}\Z|\A[\s\S]{1001,}\Z|['\"<>]|\.\.")

# Outcomes of a submission.
INVALID = "invalid"
ADVANCED = "advanced"
SUBMITTED = "submitted"


@dataclass
class Submission:
    outcome: str
    errors: List[Optional[FormField]] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def error_ids(self) -> List[str]:
        return error_label_ids(self.errors)


def query_parameter_messages(url: str) -> List[str]:
    params = FormValidator.url_get_parameters(url)
    return [f"GET parameter {key} i vrijednost '{value}' nije dozvoljen na ovoj stranici" for key, value in params.items()]


def validate_first_fieldset(fields: FieldSet) -> Submission:
    errs: List[Optional[FormField]] = (
        FormValidator.placeholders(fields.with_placeholder())
        + FormValidator.text_inputs(fields.by_type("text", "url", "textarea"))
        + FormValidator.radio_button_group(fields.by_name("musicType"))
        + FormValidator.date_time_locals(fields.by_type("datetime-local"))
        + FormValidator.select(fields.first("select"), 2)
        + FormValidator.checkbox_group(fields.by_name("lang[]"), 2)
        + FormValidator.file(fields.first("file"), IMAGE_EXTENSIONS)
    )
    messages: List[str] = []

    website = fields.first("url")
    if website is not None:
        messages = query_parameter_messages(website.value or "")
        if messages:
            errs.append(website)

    release = fields.get("releaseDateTime")
    if release is not None and not RELEASE_DATETIME_RE.search(release.value or ""):
        errs.append(release)

    songs = fields.get("songs")
    if songs is not None and INVALID_SONGS_RE.search(songs.value or ""):
        errs.append(songs)

    return Submission(INVALID if errs else ADVANCED, errs, messages)


def validate_second_fieldset(fields: FieldSet) -> List[Optional[FormField]]:
    return FormValidator.numbers(fields.by_type("number"), 0, 100)


class MusicForm:
    """
    Two-step music form.

    The second fieldset's visibility is the only state: hidden means the first step is active,
    visible means the first step was accepted and the second one is shown. Every submission
    re-validates the first fieldset.
    """

    def __init__(self, visibility: str = HIDDEN) -> None:
        self.visibility = VISIBLE if visibility == VISIBLE else HIDDEN
        self.first: FieldSet = MUSIC_FIRST_FIELDS
        self.second: FieldSet = MUSIC_SECOND_FIELDS
        self.errors: List[str] = []
        self.messages: List[str] = []

    @classmethod
    def from_form(cls, form: Any) -> "MusicForm":
        visibility = form.get(VISIBILITY_FIELD) if form is not None else None
        wizard = cls(str(visibility or HIDDEN))
        wizard.first = bind(MUSIC_FIRST_FIELDS, form)
        wizard.second = bind(MUSIC_SECOND_FIELDS, form)
        return wizard

    @property
    def second_visible(self) -> bool:
        return self.visibility == VISIBLE

    @property
    def submit_label(self) -> str:
        return SUBMIT_LABEL if self.second_visible else NEXT_LABEL

    def submit(self) -> Submission:
        self.errors = []
        self.messages = []

        first = validate_first_fieldset(self.first)
        if first.outcome == INVALID:
            self.visibility = HIDDEN
            self.errors = first.error_ids
            self.messages = first.messages
            return first

        if self.second_visible:
            errs = validate_second_fieldset(self.second)
            if errs:
                result = Submission(INVALID, errs)
                self.errors = result.error_ids
                return result
            return Submission(SUBMITTED)

        self.visibility = VISIBLE
        return Submission(ADVANCED)

    def reset(self) -> None:
        self.errors = []
        self.messages = []
        self.visibility = HIDDEN
        self.first = MUSIC_FIRST_FIELDS
        self.second = MUSIC_SECOND_FIELDS
