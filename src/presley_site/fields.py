from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, List, Optional, Sequence


# Hidden companion field that carries an accepted upload's name across re-renders.
FILENAME_SUFFIX = "__filename"


@dataclass
class Option:
    value: str
    label: str = ""
    selected: bool = False


@dataclass
class FormField:
    """
    A single form control, standing in for the browser's DOM element.

    Radio buttons and checkboxes are one `FormField` per member; the first member of
    a group carries `group_label`, and its id is the target of the group's label.
    """

    id: str
    type: str = "text"
    name: str = ""
    label: str = ""
    value: Optional[str] = ""
    placeholder: Optional[str] = None
    checked: bool = False
    options: List[Option] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    multiple: bool = False
    accept: str = ""
    min: Optional[float] = None
    max: Optional[float] = None
    group_label: Optional[str] = None

    @property
    def field_name(self) -> str:
        return self.name or self.id

    @property
    def selected_options(self) -> List[Option]:
        return [opt for opt in self.options if opt.selected]


class FieldSet(Sequence[FormField]):
    """An ordered group of fields with small query helpers (the `querySelectorAll` of a fieldset)."""

    def __init__(self, fields: Iterable[FormField], legend: str = "", id: str = "") -> None:
        self._fields = list(fields)
        self.legend = legend
        self.id = id

    def __getitem__(self, index):  # type: ignore[override]
        return self._fields[index]

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FormField]:
        return iter(self._fields)

    def __repr__(self) -> str:
        return f"FieldSet(id={self.id!r}, fields={[f.id for f in self._fields]!r})"

    def by_type(self, *types: str) -> List[FormField]:
        return [f for f in self._fields if f.type in types]

    def by_name(self, name: str) -> List[FormField]:
        return [f for f in self._fields if f.name == name]

    def with_placeholder(self) -> List[FormField]:
        return [f for f in self._fields if f.placeholder is not None]

    def get(self, field_id: str) -> Optional[FormField]:
        for f in self._fields:
            if f.id == field_id:
                return f
        return None

    def first(self, *types: str) -> Optional[FormField]:
        found = self.by_type(*types)
        return found[0] if found else None


def _getlist(form: Any, key: str) -> List[Any]:
    if form is None:
        return []
    if hasattr(form, "getlist"):
        return list(form.getlist(key))
    value = form.get(key) if isinstance(form, dict) else None
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _filename(item: Any) -> str:
    if isinstance(item, str):
        return ""
    return str(getattr(item, "filename", None) or "")


def bind_field(template: FormField, form: Any) -> FormField:
    """
    Copy a field template and fill it from submitted form data.

    `form` is a Starlette `FormData` (or any mapping with optional `getlist`).
    A key that was not submitted leaves a text-like value as None.
    """
    key = template.field_name
    values = _getlist(form, key)

    if template.type == "radio":
        return replace(template, checked=bool(values) and str(values[-1]) == template.value)
    if template.type == "checkbox":
        return replace(template, checked=template.value in [str(v) for v in values])
    if template.type == "select":
        chosen = {str(v) for v in values}
        options = [replace(opt, selected=opt.value in chosen) for opt in template.options]
        return replace(template, options=options)
    if template.type == "file":
        names = [n for n in (_filename(v) for v in values) if n]
        if not names:
            carried = _getlist(form, key + FILENAME_SUFFIX)
            names = [str(v) for v in carried if str(v or "").strip()]
        return replace(template, files=names[:1])

    value = str(values[-1]) if values else None
    return replace(template, value=value)


def bind(fieldset: FieldSet, form: Any) -> FieldSet:
    return FieldSet((bind_field(f, form) for f in fieldset), legend=fieldset.legend, id=fieldset.id)
