"""Named-slot prompt templates.

A template is fixed text plus a handful of named slots. Each slot reads one
field of the validated input and renders a ``Label: value`` line only when the
value is present, so optional fields never leave empty lines behind.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple


def is_absent(value: Any) -> bool:
    """None, blank strings and empty collections count as absent."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def format_value(value: Any) -> str:
    """Render a slot value as prompt text."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return "; ".join(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True, ensure_ascii=False)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve(data: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through nested mappings."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


@dataclass(frozen=True)
class TemplateSlot:
    """One optional ``Label: value`` line."""
    label: str
    field: str
    formatter: Callable[[Any], str] = format_value
    suffix: str = ""

    def render(self, data: Mapping[str, Any]) -> Optional[str]:
        value = resolve(data, self.field)
        if is_absent(value):
            return None
        return f"{self.label}: {self.formatter(value)}{self.suffix}"


@dataclass(frozen=True)
class PromptTemplate:
    """Preamble, input slots, optional context section, guidelines."""
    preamble: str
    slots: Tuple[TemplateSlot, ...] = ()
    guidelines: str = ""
    context_heading: str = "Conversation Context"
    uses_context: bool = True
    closing: str = field(default="")

    def render_slots(self, data: Mapping[str, Any]) -> str:
        lines = []
        for slot in self.slots:
            line = slot.render(data)
            if line is not None:
                lines.append(line)
        return "\n".join(lines)
