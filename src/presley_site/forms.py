from __future__ import annotations

import html
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from presley_site.cookies import COLOR_PATTERN, Design
from presley_site.fields import FILENAME_SUFFIX, FieldSet, FormField, Option
from presley_site.validation import FormValidator

ERROR_CLASS = "lbl-error"

IMAGE_EXTENSIONS = ["png", "jpg", "jpeg"]

LOGIN_MAX_AGE = 86400

# --- form definitions -------------------------------------------------------

LOGIN_FIELDS = FieldSet(
    [
        FormField(id="username", type="text", label="Korisničko ime"),
        FormField(id="password", type="password", label="Lozinka"),
        FormField(id="cookie-age", type="number", label="Trajanje prijave (s)", value="3600", min=0, max=LOGIN_MAX_AGE),
    ],
    legend="Prijava",
    id="login-fields",
)

MUSIC_FIRST_FIELDS = FieldSet(
    [
        FormField(id="title", type="text", label="Naziv izdanja", placeholder="npr. Elvis Is Back!"),
        FormField(id="website", type="url", label="Web stranica izdanja"),
        FormField(id="musicType", type="radio", name="musicType", value="album", label="Album", group_label="Vrsta izdanja"),
        FormField(id="musicType-single", type="radio", name="musicType", value="single", label="Singl"),
        FormField(id="musicType-ep", type="radio", name="musicType", value="ep", label="EP"),
        FormField(id="recordedAt", type="datetime-local", label="Početak snimanja"),
        FormField(
            id="releaseDateTime",
            type="text",
            label="Datum i vrijeme izlaska",
            placeholder="dd.mm.gggg. hh:mm:ss",
        ),
        FormField(
            id="genres",
            type="select",
            name="genres",
            label="Žanrovi (barem dva)",
            multiple=True,
            options=[
                Option("-1", "-- odaberite žanrove --"),
                Option("rock", "Rock and roll"),
                Option("gospel", "Gospel"),
                Option("country", "Country"),
                Option("blues", "Blues"),
                Option("pop", "Pop"),
            ],
        ),
        FormField(id="lang-hr", type="checkbox", name="lang[]", value="hr", label="Hrvatski", group_label="Jezici (barem dva)"),
        FormField(id="lang-en", type="checkbox", name="lang[]", value="en", label="Engleski"),
        FormField(id="lang-de", type="checkbox", name="lang[]", value="de", label="Njemački"),
        FormField(id="lang-it", type="checkbox", name="lang[]", value="it", label="Talijanski"),
        FormField(id="cover", type="file", label="Naslovnica (png, jpg)", accept=".png,.jpg,.jpeg"),
        FormField(id="songs", type="textarea", label="Popis pjesama (100 do 1000 znakova)"),
    ],
    legend="Izdanje",
    id="first",
)

MUSIC_SECOND_FIELDS = FieldSet(
    [
        FormField(id="price", type="range", label="Cijena", value="50", min=0, max=100),
        FormField(id="rating", type="number", label="Ocjena (0 - 100)", min=0, max=100),
    ],
    legend="Ocjena",
    id="second",
)

DESIGN_FIELDS = FieldSet(
    [
        FormField(id="primary-color", type="color", label="Primarna boja"),
        FormField(id="secondary-color", type="color", label="Sekundarna boja"),
        FormField(id="title-size", type="number", label="Veličina naslova (px)", min=5, max=50),
        FormField(
            id="text-transformation",
            type="radio",
            name="text-transformation",
            value="none",
            label="Bez promjene",
            group_label="Transformacija teksta",
        ),
        FormField(id="text-transformation-uppercase", type="radio", name="text-transformation", value="uppercase", label="Velika slova"),
        FormField(id="text-transformation-lowercase", type="radio", name="text-transformation", value="lowercase", label="Mala slova"),
        FormField(id="text-transformation-capitalize", type="radio", name="text-transformation", value="capitalize", label="Veliko početno slovo"),
        FormField(id="opacity", type="number", label="Neprozirnost (%)", min=0, max=100),
    ],
    legend="Dizajn",
    id="design-fields",
)

STATISTICS_FIELDS = FieldSet(
    [
        FormField(id="name", type="text", label="Naziv"),
        FormField(id="value", type="number", label="Vrijednost", min=0, max=100),
    ],
    legend="Novi podatak",
    id="stats-fields",
)


# --- validation compositions --------------------------------------------------


def validate_login(fields: FieldSet) -> List[Optional[FormField]]:
    return FormValidator.text_inputs_without_space(fields.by_type("text", "password")) + FormValidator.numbers(
        fields.by_type("number"), 0, LOGIN_MAX_AGE
    )


def invalid_colors(elements: Iterable[Optional[FormField]]) -> List[FormField]:
    """Colour inputs left blank keep the current colour; anything else must be a hex colour."""
    return [
        el
        for el in elements
        if el is not None and (el.value or "").strip() and not re.match(COLOR_PATTERN, el.value.strip())
    ]


def validate_design(fields: FieldSet) -> List[Optional[FormField]]:
    return (
        invalid_colors(fields.by_type("color"))
        + FormValidator.numbers([fields.get("title-size")], 5, 50)
        + FormValidator.radio_button_group(fields.by_name("text-transformation"))
        + FormValidator.numbers([fields.get("opacity")])
    )


def validate_statistics(fields: FieldSet) -> List[Optional[FormField]]:
    return FormValidator.text_inputs(fields.by_type("text")) + FormValidator.numbers(fields.by_type("number"))


def checked_value(group: Iterable[FormField]) -> Optional[str]:
    for field in group:
        if field.checked:
            return field.value
    return None


def design_from_fields(fields: FieldSet, fallback: Design) -> Design:
    def _value(field_id: str, default: Any) -> Any:
        field = fields.get(field_id)
        raw = (field.value or "").strip() if field is not None else ""
        return raw or default

    return Design(
        primary_color=_value("primary-color", fallback.primary_color),
        secondary_color=_value("secondary-color", fallback.secondary_color),
        title_size=int(float(_value("title-size", fallback.title_size))),
        text_transform=checked_value(fields.by_name("text-transformation")) or fallback.text_transform,
        opacity=int(float(_value("opacity", fallback.opacity))),
    )


def design_values(design: Design) -> Dict[str, str]:
    return {
        "primary-color": design.primary_color,
        "secondary-color": design.secondary_color,
        "title-size": str(design.title_size),
        "text-transformation": design.text_transform,
        "opacity": str(design.opacity),
    }


def prefill(fieldset: FieldSet, values: Mapping[str, str]) -> FieldSet:
    """Fill field values by id; radio groups are checked by name."""
    out: List[FormField] = []
    for field in fieldset:
        if field.type == "radio" and field.name in values:
            out.append(replace(field, checked=values[field.name] == field.value))
        elif field.id in values:
            out.append(replace(field, value=values[field.id]))
        else:
            out.append(field)
    return FieldSet(out, legend=fieldset.legend, id=fieldset.id)


# --- rendering ----------------------------------------------------------------


def _e(text: Any) -> str:
    return html.escape("" if text is None else str(text), quote=True)


def _number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _label(field_id: str, text: str, errors: Sequence[str]) -> str:
    cls = f' class="{ERROR_CLASS}"' if field_id in errors else ""
    return f'<label for="{_e(field_id)}"{cls}>{_e(text)}</label>'


def render_field(field: FormField, errors: Sequence[str] = ()) -> str:
    fid = _e(field.id)
    name = _e(field.field_name)

    if field.type in {"radio", "checkbox"}:
        parts = []
        if field.group_label is not None:
            parts.append(_label(field.id, field.group_label, errors))
        checked = " checked" if field.checked else ""
        parts.append(f'<input type="{field.type}" id="{fid}" name="{name}" value="{_e(field.value)}"{checked}/>')
        parts.append(f'<label for="{fid}">{_e(field.label)}</label>')
        return "".join(parts)

    label = _label(field.id, field.label, errors)

    if field.type == "textarea":
        return f'{label}<textarea id="{fid}" name="{name}">{_e(field.value)}</textarea>'

    if field.type == "select":
        multiple = " multiple" if field.multiple else ""
        options = "".join(
            f'<option value="{_e(opt.value)}"{" selected" if opt.selected else ""}>{_e(opt.label)}</option>'
            for opt in field.options
        )
        return f'{label}<select id="{fid}" name="{name}"{multiple}>{options}</select>'

    if field.type == "file":
        accept = f' accept="{_e(field.accept)}"' if field.accept else ""
        out = f'{label}<input type="file" id="{fid}" name="{name}"{accept}/>'
        if field.files:
            out += f'<input type="hidden" name="{name}{FILENAME_SUFFIX}" value="{_e(field.files[0])}"/>'
        return out

    attrs = [f'type="{field.type}"', f'id="{fid}"', f'name="{name}"']
    if field.value is not None:
        attrs.append(f'value="{_e(field.value)}"')
    if field.placeholder is not None:
        attrs.append(f'placeholder="{_e(field.placeholder)}"')
    if field.min is not None:
        attrs.append(f'min="{_number(field.min)}"')
    if field.max is not None:
        attrs.append(f'max="{_number(field.max)}"')
    out = f"{label}<input {' '.join(attrs)}/>"
    if field.type == "range":
        out += f'<output for="{fid}">{_e(field.value)}&euro;</output>'
    return out


def render_fieldset(fieldset: FieldSet, errors: Sequence[str] = (), style: str = "") -> str:
    fid = f' id="{_e(fieldset.id)}"' if fieldset.id else ""
    st = f' style="{_e(style)}"' if style else ""
    legend = f"<legend>{_e(fieldset.legend)}</legend>" if fieldset.legend else ""
    body = "".join(f'<div class="form-row">{render_field(f, errors)}</div>' for f in fieldset)
    return f"<fieldset{fid}{st}>{legend}{body}</fieldset>"


def render_form(
    form_id: str,
    fieldsets: Sequence[FieldSet],
    *,
    action: str,
    errors: Iterable[str] = (),
    hidden: Optional[Mapping[str, str]] = None,
    styles: Optional[Mapping[str, str]] = None,
    submit_label: str = "Pošalji",
    reset_label: Optional[str] = "Poništi",
    multipart: bool = False,
) -> str:
    """
    Render a form as HTML.

    Labels of fields listed in `errors` get the `lbl-error` class. `styles` maps fieldset
    ids to inline styles.
    """
    marked = list(errors)
    enctype = ' enctype="multipart/form-data"' if multipart else ""
    parts = [f'<form id="{_e(form_id)}" action="{_e(action)}" method="post"{enctype}>']
    for fieldset in fieldsets:
        parts.append(render_fieldset(fieldset, marked, (styles or {}).get(fieldset.id, "")))
    for name, value in (hidden or {}).items():
        parts.append(f'<input type="hidden" name="{_e(name)}" value="{_e(value)}"/>')
    parts.append(f'<input type="submit" value="{_e(submit_label)}"/>')
    if reset_label:
        parts.append(f'<input type="submit" name="reset" value="{_e(reset_label)}" formnovalidate/>')
    parts.append("</form>")
    return "".join(parts)


def render_alerts(messages: Iterable[str]) -> str:
    items = [m for m in messages if m]
    if not items:
        return ""
    lis = "".join(f"<li>{_e(m)}</li>" for m in items)
    return f'<ul class="alert" role="alert">{lis}</ul>'
