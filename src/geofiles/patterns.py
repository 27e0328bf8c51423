"""
Split composite labels into named parts with an ordered list of templates.

A template such as ``"{party}_{measure}"`` is compiled to an anchored regular
expression. ``{field}`` matches any text (lazily), ``{field=regex}`` matches
the given regex and literal text must match verbatim. Templates are tried in
order and the first full match wins.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .errors import NoMatchError

# {name} or {name=regex}; the regex may itself contain {m,n} quantifiers
_FIELD = re.compile(r"\{(\w+)(?:=((?:[^{}]|\{[^{}]*\})*))?\}")


@dataclass(frozen=True)
class PatternTemplate:
    """
    A compiled template.

    Attributes
    ----------
    name : str
        Tag reported for values matched by this template
    template : str
        Source template text
    regex : re.Pattern
        Anchored regular expression built from the template
    fields : tuple of str
        Field names in template order
    """

    name: str
    template: str
    regex: re.Pattern
    fields: Tuple[str, ...]

    def match(self, text: str) -> Optional[Dict[str, str]]:
        """Return the extracted fields, or None if the text does not match."""
        m = self.regex.fullmatch(text)
        if m is None:
            return None
        return {field: m.group(field) for field in self.fields}


@dataclass(frozen=True)
class PatternMatch:
    """Result of unglue(): which template matched and what it extracted."""

    template: str
    values: Dict[str, str]

    def __getitem__(self, field: str) -> str:
        return self.values[field]


def compile_template(template: str, name: Optional[str] = None) -> PatternTemplate:
    """
    Compile a template string.

    Parameters
    ----------
    template : str
        Template text, e.g. ``"{party}_{measure}"`` or ``"{year=\\d{4}}-{rest}"``
    name : str, optional
        Tag for this variant. Defaults to the template text.

    Raises
    ------
    ValueError
        If the template has no fields, repeats a field or holds an invalid regex
    """
    parts = []
    fields = []
    pos = 0
    for m in _FIELD.finditer(template):
        parts.append(re.escape(template[pos:m.start()]))
        field, pattern = m.group(1), m.group(2)
        if field in fields:
            raise ValueError(f"Field '{field}' repeated in template {template!r}")
        fields.append(field)
        parts.append(f"(?P<{field}>{pattern if pattern else '.*?'})")
        pos = m.end()
    parts.append(re.escape(template[pos:]))

    if not fields:
        raise ValueError(f"Template {template!r} has no {{field}} placeholders")

    try:
        regex = re.compile("".join(parts), re.DOTALL)
    except re.error as e:
        raise ValueError(f"Invalid regex in template {template!r}: {e}") from e

    return PatternTemplate(name=name or template, template=template, regex=regex, fields=tuple(fields))


def _as_templates(templates: Iterable[Union[str, PatternTemplate]]) -> List[PatternTemplate]:
    compiled = [t if isinstance(t, PatternTemplate) else compile_template(t) for t in templates]
    if not compiled:
        raise ValueError("At least one template is required")
    return compiled


def unglue(text: str, templates: Sequence[Union[str, PatternTemplate]]) -> PatternMatch:
    """
    Match ``text`` against each template in order and return the first hit.

    Raises
    ------
    NoMatchError
        If no template matches the whole text

    Examples
    --------
    >>> unglue("cdu_anzahl", ["{party}_{measure}"]).values
    {'party': 'cdu', 'measure': 'anzahl'}
    """
    compiled = _as_templates(templates)
    if isinstance(text, str):
        for template in compiled:
            values = template.match(text)
            if values is not None:
                return PatternMatch(template=template.name, values=values)
    raise NoMatchError(str(text), [t.template for t in compiled])


def unglue_column(
    values: Iterable[str],
    templates: Sequence[Union[str, PatternTemplate]],
) -> pd.DataFrame:
    """
    Apply unglue() to every value.

    Returns a frame with one column per field (union over all templates,
    ``None`` where the matching template lacks the field) and a ``template``
    column naming the variant that matched. A Series keeps its index.
    """
    compiled = _as_templates(templates)
    columns: List[str] = []
    for template in compiled:
        columns.extend(f for f in template.fields if f not in columns)

    index = values.index if isinstance(values, pd.Series) else None
    records = []
    for value in values:
        result = unglue(value, compiled)
        record = {field: result.values.get(field) for field in columns}
        record["template"] = result.template
        records.append(record)

    frame = pd.DataFrame(records, columns=columns + ["template"])
    if index is not None:
        frame.index = index
    return frame
