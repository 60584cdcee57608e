from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

from presley_site.fields import FormField

# Select options with this value are prompts ("-- choose --"), never a real selection.
SENTINEL_OPTION_VALUE = "-1"


def _to_number(value: Optional[str]) -> Optional[float]:
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    # Non-finite values ("nan", "inf") fail like any other non-number.
    return number if math.isfinite(number) else None


class FormValidator:
    """
    Generalized form validator.

    Every predicate takes fields and returns the ones that do not pass, so results
    from several predicates can be concatenated. An empty list means success.
    """

    @staticmethod
    def text_inputs(elements: Iterable[FormField]) -> List[FormField]:
        """Validates required text inputs."""
        invalid: List[FormField] = []
        for el in elements:
            if el.value is None:
                invalid.append(el)
            elif el.value.strip() == "":
                invalid.append(el)
        return invalid

    @staticmethod
    def text_inputs_without_space(elements: Iterable[FormField]) -> List[FormField]:
        """Required text inputs whose trimmed value may not contain a space."""
        invalid: List[FormField] = []
        for el in elements:
            if el.value is None:
                invalid.append(el)
            elif " " in el.value.strip():
                invalid.append(el)
            elif el.value.strip() == "":
                invalid.append(el)
        return invalid

    @staticmethod
    def radio_button_group(group: Sequence[FormField]) -> List[FormField]:
        """
        At least one radio button of the group must be checked.

        The first radio button carries the id targeted by the group label, so it is the one
        reported.
        """
        if not group:
            return []
        return [] if any(rb.checked for rb in group) else [group[0]]

    @staticmethod
    def date_time_locals(elements: Iterable[FormField]) -> List[FormField]:
        return [el for el in elements if (el.value or "").strip() == ""]

    @staticmethod
    def select(element: Optional[FormField], min_selected_items: int = 1) -> List[FormField]:
        if element is None:
            return []
        chosen = [opt for opt in element.options if opt.selected and opt.value != SENTINEL_OPTION_VALUE]
        return [element] if len(chosen) < min_selected_items else []

    @staticmethod
    def checkbox_group(group: Sequence[FormField], min_selected_items: int = 1) -> List[FormField]:
        if not group:
            return []
        checked = [cb for cb in group if cb.checked]
        return [group[0]] if len(checked) < min_selected_items else []

    @staticmethod
    def file(element: Optional[FormField], extensions: Iterable[str]) -> List[FormField]:
        """The first chosen file must have one of the given extensions (compared as-is)."""
        if element is None:
            return []
        if not element.files:
            return [element]
        extension = element.files[0].split(".")[-1]
        return [] if extension in list(extensions) else [element]

    @staticmethod
    def numbers(
        elements: Iterable[Optional[FormField]],
        min_value: float = 0,
        max_value: float = 100,
    ) -> List[Optional[FormField]]:
        """Number inputs must be non-empty and within [min_value, max_value]."""
        invalid: List[Optional[FormField]] = []
        for el in elements:
            if el is None:
                invalid.append(el)
                continue
            if el.value is None or el.value.strip() == "":
                invalid.append(el)
                continue
            number = _to_number(el.value)
            if number is None or number < min_value or number > max_value:
                invalid.append(el)
        return invalid

    @staticmethod
    def placeholders(elements: Iterable[FormField]) -> List[FormField]:
        """Inputs with placeholders have to be of type 'text'."""
        return [el for el in elements if el.type != "text"]

    @staticmethod
    def url_get_parameters(url: str) -> Dict[str, str]:
        """
        Extract GET parameters from a url.

        No decoding happens and the last occurrence of a key wins. Keys come back wrapped
        in single quotes: `"a.html?x=1"` -> `{"'x'": "1"}`.
        """
        query_params: Dict[str, str] = {}
        parts = str(url or "").split("?")
        if len(parts) == 2:
            for param in parts[1].split("&"):
                pieces = param.split("=")
                query_params[f"'{pieces[0]}'"] = pieces[1] if len(pieces) > 1 else ""
        return query_params


def error_label_ids(errors: Iterable[Optional[FormField]]) -> List[str]:
    """Ids of the labels to mark for failing fields (None entries are dropped)."""
    out: List[str] = []
    for el in errors:
        if el is None or not el.id:
            continue
        if el.id not in out:
            out.append(el.id)
    return out
