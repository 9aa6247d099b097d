# File: /app/crud/templates.py | Version: 1.0 | Title: Built-in column/view templates for task and event databases
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from app.storage.naming import new_column_id

DEFAULT_CHOICE_COLOR = "bg-gray-200"

TASK_STATUS_CHOICES = [
    ("backlog", "Backlog", "bg-gray-200"),
    ("pending", "To do", "bg-yellow-200"),
    ("in_progress", "In progress", "bg-blue-200"),
    ("completed", "Completed", "bg-green-200"),
    ("cancelled", "Cancelled", "bg-gray-300"),
    ("blocked", "Blocked", "bg-red-200"),
    ("awaiting_info", "Awaiting info", "bg-purple-200"),
]
TASK_PRIORITY_CHOICES = [
    ("low", "Low", "bg-gray-100"),
    ("medium", "Medium", "bg-yellow-200"),
    ("high", "High", "bg-orange-200"),
    ("critical", "Critical", "bg-red-300"),
]
TASK_TYPE_CHOICES = [
    ("epic", "Epic", "bg-purple-200"),
    ("feature", "Feature", "bg-blue-200"),
    ("task", "Task", "bg-green-200"),
]
TASK_TAG_CHOICES = [
    ("frontend", "Frontend", "bg-cyan-200"),
    ("backend", "Backend", "bg-indigo-200"),
    ("ops", "OPS", "bg-orange-200"),
    ("bug", "Bug", "bg-red-200"),
    ("enhancement", "Enhancement", "bg-green-200"),
]
EVENT_CATEGORY_CHOICES = [
    ("meeting", "Meeting", "bg-blue-200"),
    ("deadline", "Deadline", "bg-red-200"),
    ("milestone", "Milestone", "bg-purple-200"),
    ("reminder", "Reminder", "bg-yellow-200"),
    ("personal", "Personal", "bg-green-200"),
    ("other", "Other", "bg-gray-200"),
]


def _choices(items: List[Tuple[str, str, str]]) -> Dict[str, Any]:
    return {"choices": [{"id": cid, "label": label, "color": color} for cid, label, color in items]}


def make_column(
    name: str,
    col_type: str,
    order: int,
    *,
    visible: bool = True,
    required: bool = False,
    readonly: bool = False,
    width: Optional[int] = None,
    color: Optional[str] = None,
    options: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "id": new_column_id(),
        "name": name,
        "type": col_type,
        "visible": visible,
        "order": order,
        "required": required,
        "readonly": readonly,
        "width": width,
        "color": color,
        "options": options,
    }


# (name, type, kwargs) in display order
_TASK_COLUMNS = [
    ("Title", "text", dict(required=True, readonly=True, width=200, color="blue")),
    ("Description", "text", dict(readonly=True, width=300, color="green")),
    ("Status", "select", dict(readonly=True, width=180, color="yellow", options=_choices(TASK_STATUS_CHOICES))),
    ("Priority", "select", dict(readonly=True, width=180, color="red", options=_choices(TASK_PRIORITY_CHOICES))),
    ("Type", "select", dict(readonly=True, width=180, color="purple", options=_choices(TASK_TYPE_CHOICES))),
    ("Assigned To", "person", dict(readonly=True, width=200, color="pink")),
    ("Due Date", "date", dict(readonly=True, width=150, color="orange", options={"date_format": "DD/MM/YYYY"})),
    ("Tags", "multi-select", dict(readonly=True, width=220, color="gray", options=_choices(TASK_TAG_CHOICES))),
    ("Estimated Hours", "number", dict(readonly=True, width=120, color="blue", options={"format": "decimal"})),
    ("Actual Hours", "number", dict(readonly=True, width=120, color="green", options={"format": "decimal"})),
    ("Parent Task ID", "relation", dict(visible=False, width=200, color="yellow")),
    ("Epic ID", "relation", dict(visible=False, width=200, color="red")),
    ("Feature ID", "relation", dict(visible=False, width=200, color="purple")),
    ("Project ID", "relation", dict(visible=False, width=200, color="pink")),
    ("Task Number", "text", dict(readonly=True, width=120, color="gray")),
]

_EVENT_COLUMNS = [
    ("Title", "text", dict(required=True, readonly=True, width=200, color="blue")),
    ("Description", "text", dict(readonly=True, width=300, color="green")),
    ("Start Date", "date", dict(required=True, readonly=True, width=180, color="orange", options={"date_format": "DD/MM/YYYY HH:mm"})),
    ("End Date", "date", dict(readonly=True, width=180, color="orange", options={"date_format": "DD/MM/YYYY HH:mm"})),
    ("All Day", "checkbox", dict(readonly=True, width=100, color="gray")),
    ("Category", "select", dict(readonly=True, width=160, color="purple", options=_choices(EVENT_CATEGORY_CHOICES))),
    ("Location", "text", dict(readonly=True, width=200, color="green")),
    ("Recurrence", "text", dict(visible=False, width=200, color="yellow")),
    ("Linked Items", "relation", dict(visible=False, width=250, color="blue")),
    ("Project ID", "relation", dict(visible=False, width=200, color="pink")),
    ("Reminders", "text", dict(visible=False, width=200, color="red")),
]


def _build(layout: List[Tuple[str, str, Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [make_column(name, col_type, i, **kw) for i, (name, col_type, kw) in enumerate(layout)]


def _by_name(columns: List[Dict[str, Any]], name: str) -> str:
    return next(c["id"] for c in columns if c["name"] == name)


def task_template() -> Dict[str, Any]:
    columns = _build(_TASK_COLUMNS)
    status_id = _by_name(columns, "Status")
    return {
        "columns": columns,
        "views": [
            {"id": "view-table", "name": "Table", "type": "table", "config": {}},
            {"id": "view-kanban", "name": "Board", "type": "kanban", "config": {"group_by": status_id}},
            {
                "id": "view-calendar",
                "name": "Calendar",
                "type": "calendar",
                "config": {"date_column_id": _by_name(columns, "Due Date")},
            },
        ],
        "default_view": "table",
        "pinned_columns": [status_id],
    }


def event_template() -> Dict[str, Any]:
    columns = _build(_EVENT_COLUMNS)
    return {
        "columns": columns,
        "views": [
            {
                "id": "view-calendar",
                "name": "Calendar",
                "type": "calendar",
                "config": {"date_column_id": _by_name(columns, "Start Date")},
            },
            {"id": "view-table", "name": "Table", "type": "table", "config": {}},
        ],
        "default_view": "calendar",
        "pinned_columns": [],
    }


def generic_template() -> Dict[str, Any]:
    return {
        "columns": [],
        "views": [{"id": "view-table", "name": "Table", "type": "table", "config": {}}],
        "default_view": "table",
        "pinned_columns": [],
    }


TEMPLATES = {
    "task": task_template,
    "event": event_template,
    "generic": generic_template,
}
