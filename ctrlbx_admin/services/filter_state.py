# =======================================================================================
# ctrlbx_admin/services/filter_state.py - Per-view Filter State
# =======================================================================================
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models.enums import Status
from ..utils.validators import is_device_online


def record_field(record: Any, field: str) -> Any:
    """Read a field from a dict or a pydantic record."""
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


class MultiSelect:
    """
    Checkbox group for one filter dimension.

    Toggling only changes the in-memory selection; nothing is recomputed until
    the owning controller is asked to apply. A selection that covers every
    option is stored as [] so options added later are included too, and an
    empty selection means "no restriction".
    """

    def __init__(
        self,
        dimension: str,
        options: Iterable[str],
        selection: Optional[Sequence[str]] = None,
        default_label: str = "Todos",
        label_fn: Optional[Callable[[str], str]] = None,
    ):
        self.dimension = dimension
        self.default_label = default_label
        self.label_fn = label_fn or (lambda v: v)
        self.options: List[str] = list(dict.fromkeys(options))
        wanted = set(selection or [])
        self._checked = {opt for opt in self.options if opt in wanted} or set(self.options)

    @property
    def selection(self) -> List[str]:
        ordered = self.checked()
        if len(ordered) == len(self.options):
            return []
        return ordered

    def set_options(self, options: Iterable[str]) -> None:
        """Replace the option list, keeping whatever is still selectable."""
        everything = len(self._checked) == len(self.options)
        self.options = list(dict.fromkeys(options))
        if everything:
            self._checked = set(self.options)
        else:
            self._checked = {opt for opt in self.options if opt in self._checked}

    def is_checked(self, value: str) -> bool:
        return value in self._checked

    def checked(self) -> List[str]:
        return [opt for opt in self.options if opt in self._checked]

    def set_checked(self, value: str, checked: bool) -> None:
        if value not in self.options:
            return
        if checked:
            self._checked.add(value)
        else:
            self._checked.discard(value)

    def toggle(self, value: str) -> None:
        self.set_checked(value, not self.is_checked(value))

    def select_all(self) -> None:
        self._checked = set(self.options)

    def label(self) -> str:
        checked = self.checked()
        if not checked or len(checked) == len(self.options):
            return self.default_label
        if len(checked) == 1:
            return self.label_fn(checked[0])
        return f"{len(checked)} sel."

    def matches(self, value: Any) -> bool:
        return not self.selection or value in self.selection

    def describe(self) -> Dict[str, Any]:
        return {
            "dimension": self.dimension,
            "label": self.label(),
            "options": [
                {"value": opt, "label": self.label_fn(opt), "checked": self.is_checked(opt)}
                for opt in self.options
            ],
            "selection": list(self.selection),
        }


@dataclass
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    def as_params(self) -> Dict[str, str]:
        params = {}
        if self.start:
            params["start_date"] = self.start.isoformat()
        if self.end:
            params["end_date"] = self.end.isoformat()
        return params


class FilterStateController:
    """
    Multi-dimension filter state for one list view.

    `fields` maps each dimension to the record field it restricts and
    `params` (optional) to the backend query parameter it is sent as.
    """

    def __init__(
        self,
        fields: Mapping[str, str],
        params: Optional[Mapping[str, str]] = None,
        date_range: Optional[DateRange] = None,
    ):
        self.fields = dict(fields)
        self.params = dict(params or {})
        self.date_range = date_range
        self.selects: Dict[str, MultiSelect] = {}

    def build_multi_select(
        self,
        dimension: str,
        options: Iterable[str],
        default_label: str = "Todos",
        label_fn: Optional[Callable[[str], str]] = None,
        selection: Optional[Sequence[str]] = None,
    ) -> MultiSelect:
        if dimension not in self.fields:
            raise KeyError(f"Unknown filter dimension '{dimension}'")
        existing = self.selects.get(dimension)
        if existing is not None and selection is None:
            existing.set_options(options)
            return existing
        select = MultiSelect(dimension, options, selection, default_label, label_fn)
        self.selects[dimension] = select
        return select

    def toggle(self, dimension: str, value: str) -> None:
        self.selects[dimension].toggle(value)

    def selection(self, dimension: str) -> List[str]:
        select = self.selects.get(dimension)
        return list(select.selection) if select else []

    def set_dates(self, start: Optional[date], end: Optional[date]) -> None:
        self.date_range = DateRange(start, end)

    def apply(self, records: Iterable[Any]) -> List[Any]:
        """Keep records matching every restricted dimension, in upstream order."""
        active = [
            (self.fields[dim], select)
            for dim, select in self.selects.items()
            if select.selection
        ]
        result = []
        for record in records:
            if all(select.matches(record_field(record, field) or "") for field, select in active):
                result.append(record)
        return result

    def query_params(self) -> Dict[str, str]:
        """Committed selection rendered as backend request parameters."""
        params: Dict[str, str] = {}
        if self.date_range:
            params.update(self.date_range.as_params())
        for dim, name in self.params.items():
            values = self.selection(dim)
            if values:
                params[name] = ",".join(values)
        return params

    def describe(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {dim: sel.describe() for dim, sel in self.selects.items()}
        if self.date_range:
            out["date_range"] = self.date_range.as_params()
        return out


# ---------- instant single-select filters ----------

@dataclass
class DeviceFilter:
    """Device list dropdowns; each change re-renders immediately."""
    house_id: str = ""
    token_type: str = ""
    status: str = ""        # '' | ACTIVO | INACTIVO
    connection: str = ""    # '' | ONLINE | OFFLINE

    def apply(self, devices: Iterable[Any], now: Optional[datetime] = None) -> List[Any]:
        result = list(devices)
        if self.house_id:
            result = [d for d in result if record_field(d, "house_id") == self.house_id]
        if self.token_type:
            result = [d for d in result if record_field(d, "token_type") == self.token_type]
        if self.status:
            want_active = self.status == Status.ACTIVE.value
            result = [d for d in result if bool(record_field(d, "active")) == want_active]
        if self.connection:
            want_online = self.connection == "ONLINE"
            result = [
                d for d in result
                if is_device_online(record_field(d, "last_seen"), now) == want_online
            ]
        return result


@dataclass
class UserFilter:
    search_term: str = ""
    status: str = ""        # '' | ACTIVO | INACTIVO
    sort_name: str = ""     # '' | asc | desc

    def reset(self) -> None:
        self.search_term = ""
        self.status = ""
        self.sort_name = ""

    def apply(self, users: Iterable[Any]) -> List[Any]:
        result = list(users)
        term = self.search_term.lower()
        if term:
            result = [
                u for u in result
                if term in (record_field(u, "user_name") or "").lower()
                or term in (record_field(u, "uid") or "").lower()
            ]
        if self.status:
            result = [u for u in result if record_field(u, "status") == self.status]
        if self.sort_name in ("asc", "desc"):
            result.sort(
                key=lambda u: (record_field(u, "user_name") or "").lower(),
                reverse=self.sort_name == "desc",
            )
        return result
