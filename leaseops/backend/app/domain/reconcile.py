# app/domain/reconcile.py
"""
Field-level reconciliation between a stored property and a fresh extraction.

compute_diffs() is pure: same stored values + same snapshot => same diff list.
plan_commit() is pure too; it turns reviewed diffs into the exact set of column
values to write plus per-field coercion failures. Writing is the repository's job.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from .errors import CommitCoercionFailure
from .normalize import coerce_property_type
from .parsing import to_float
from .types import ExtractedSnapshot, is_unset

EMPTY_DISPLAY = "(empty)"
DISPLAY_MAX_CHARS = 40


class FieldKind(str, enum.Enum):
    integer = "integer"
    number = "number"
    money = "money"
    property_type = "property_type"
    text = "text"


@dataclass(frozen=True)
class ComparableField:
    key: str  # stored property attribute
    label: str
    kind: FieldKind
    snapshot_attr: str


# Address, photos and status are deliberately absent: they have their own update paths.
COMPARABLE_FIELDS: tuple[ComparableField, ...] = (
    ComparableField("bedrooms", "Bedrooms", FieldKind.integer, "bedrooms"),
    ComparableField("bathrooms", "Bathrooms", FieldKind.number, "bathrooms"),
    ComparableField("square_feet", "Sq Ft", FieldKind.integer, "sqft"),
    ComparableField("rent_price", "Monthly Rent", FieldKind.money, "price"),
    ComparableField("property_type", "Property Type", FieldKind.property_type, "property_type"),
    ComparableField("deposit_amount", "Security Deposit", FieldKind.money, "deposit_amount"),
    ComparableField("application_fee", "Application Fee", FieldKind.money, "application_fee"),
    ComparableField("description", "Description", FieldKind.text, "description"),
    ComparableField("pet_policy", "Pet Policy", FieldKind.text, "pet_policy"),
)
FIELDS_BY_KEY: dict[str, ComparableField] = {f.key: f for f in COMPARABLE_FIELDS}


class DiffDecision(str, enum.Enum):
    unreviewed = "unreviewed"  # counts as approved
    approved = "approved"
    rejected = "rejected"


@dataclass(frozen=True)
class FieldDiff:
    field_key: str
    label: str
    current_display: str
    incoming_display: str
    decision: DiffDecision = DiffDecision.unreviewed

    @property
    def approved(self) -> bool:
        return self.decision != DiffDecision.rejected


@dataclass(frozen=True)
class CommitPlan:
    values: dict[str, Any] = field(default_factory=dict)
    failures: tuple[CommitCoercionFailure, ...] = ()
    skipped: tuple[str, ...] = ()  # rejected by the reviewer


def display_value(v: Any) -> str:
    """
    Stringify the way the diff panel always has: integral floats lose the ".0",
    enums show their value, missing values are "".
    """
    if v is None:
        return ""
    if isinstance(v, enum.Enum):
        v = v.value
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        if v.is_integer():
            return str(int(v))
        return repr(v)
    return str(v)


def _current_display(v: Any) -> str:
    # 0 / "" / None all read as empty on the stored side
    if is_unset(v):
        return ""
    return display_value(v)


def compute_diffs(
    current: Any,
    incoming: ExtractedSnapshot,
    *,
    unobserved: Iterable[str] = (),
) -> list[FieldDiff]:
    """
    One FieldDiff per comparable field whose incoming value is present and whose
    string form differs from the stored one. `unobserved` lists snapshot attributes
    that only hold defaults (e.g. property_type nobody actually saw); they never diff.
    """
    skip = set(unobserved)
    diffs: list[FieldDiff] = []
    for f in COMPARABLE_FIELDS:
        if f.snapshot_attr in skip:
            continue
        incoming_val = getattr(incoming, f.snapshot_attr)
        if is_unset(incoming_val):
            continue

        inc = display_value(incoming_val)
        cur = _current_display(getattr(current, f.key, None))
        if inc != cur:
            diffs.append(
                FieldDiff(
                    field_key=f.key,
                    label=f.label,
                    current_display=cur or EMPTY_DISPLAY,
                    incoming_display=inc,
                )
            )
    return diffs


def apply_decisions(
    diffs: Iterable[FieldDiff],
    decisions: Mapping[str, bool | DiffDecision],
) -> list[FieldDiff]:
    """Checkbox state -> new diff values. Keys not mentioned keep their decision."""
    out: list[FieldDiff] = []
    for d in diffs:
        if d.field_key not in decisions:
            out.append(d)
            continue
        raw = decisions[d.field_key]
        if isinstance(raw, DiffDecision):
            decision = raw
        else:
            decision = DiffDecision.approved if raw else DiffDecision.rejected
        out.append(replace(d, decision=decision))
    return out


def coerce_incoming(field_key: str, incoming: str) -> Any:
    """Display string -> column value. Raises CommitCoercionFailure."""
    spec = FIELDS_BY_KEY.get(field_key)
    if spec is None:
        raise CommitCoercionFailure(field_key, incoming, "not a reconcilable field")

    text = (incoming or "").strip()
    if not text or text == EMPTY_DISPLAY:
        raise CommitCoercionFailure(field_key, incoming, "empty value")

    if spec.kind == FieldKind.text:
        return text

    if spec.kind == FieldKind.property_type:
        pt = coerce_property_type(text)
        if pt is None:
            raise CommitCoercionFailure(field_key, incoming, "unknown property type")
        return pt

    num = to_float(text.lstrip("$").replace(",", ""))
    if num is None:
        raise CommitCoercionFailure(field_key, incoming, "not a number")
    if num < 0:
        raise CommitCoercionFailure(field_key, incoming, "negative value")

    if spec.kind == FieldKind.integer:
        if not num.is_integer():
            raise CommitCoercionFailure(field_key, incoming, "expected a whole number")
        return int(num)
    return num


def plan_commit(diffs: Iterable[FieldDiff]) -> CommitPlan:
    """
    Approved diffs become column values; rejected ones are skipped; a value that
    will not coerce is reported for its field and does not block the others.
    """
    values: dict[str, Any] = {}
    failures: list[CommitCoercionFailure] = []
    skipped: list[str] = []
    seen: set[str] = set()

    for d in diffs:
        if d.field_key in seen:
            failures.append(CommitCoercionFailure(d.field_key, d.incoming_display, "duplicate field in diff set"))
            continue
        seen.add(d.field_key)

        if not d.approved:
            skipped.append(d.field_key)
            continue
        try:
            values[d.field_key] = coerce_incoming(d.field_key, d.incoming_display)
        except CommitCoercionFailure as e:
            failures.append(e)

    return CommitPlan(values=values, failures=tuple(failures), skipped=tuple(skipped))


def format_for_display(diff: FieldDiff) -> tuple[str, str]:
    """($-prefixed for money, truncated to 40 chars) pair for the review panel."""
    spec = FIELDS_BY_KEY.get(diff.field_key)
    is_money = spec is not None and spec.kind == FieldKind.money

    cur = diff.current_display
    inc = diff.incoming_display
    if is_money:
        if cur != EMPTY_DISPLAY:
            cur = f"${cur}"
        inc = f"${inc}"

    def _trunc(s: str) -> str:
        return s[:DISPLAY_MAX_CHARS] + "..." if len(s) > DISPLAY_MAX_CHARS else s

    return _trunc(cur), _trunc(inc)
