from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

Handler = Callable[..., Any]


class Control:
    def __init__(self, id: str):
        self.id = id
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> "Control":
        self._handlers.setdefault(event, []).append(handler)
        return self

    def off(self, event: str, handler: Handler) -> None:
        hs = self._handlers.get(event, [])
        if handler in hs:
            hs.remove(handler)

    def emit(self, event: str, *args: Any) -> None:
        for h in list(self._handlers.get(event, [])):
            h(*args)


class Button(Control):
    def __init__(self, id: str, label: str = ""):
        super().__init__(id)
        self.label = label

    def click(self) -> None:
        self.emit("click")


class Checkbox(Control):
    def __init__(self, id: str, value: str, label: str = "", checked: bool = False):
        super().__init__(id)
        self.value = value
        self.label = label or value
        self.checked = checked
        self.display = ""

    def set_checked(self, checked: bool) -> None:
        if bool(checked) == self.checked:
            return
        self.checked = bool(checked)
        self.emit("change", self.value, self.checked)


class CheckboxGroup(Control):
    """A container of checkbox rows; row changes bubble up as "change"."""

    def __init__(self, id: str, options: Iterable[tuple[str, str]] = (), checked: Iterable[str] = ()):
        super().__init__(id)
        self.boxes: list[Checkbox] = []
        on = set(checked)
        for value, label in options:
            self.add(value, label, value in on)

    def add(self, value: str, label: str = "", checked: bool = False) -> Checkbox:
        box = Checkbox(f"{self.id}-{value}", value, label, checked)
        box.on("change", lambda v, c: self.emit("change", v, c))
        self.boxes.append(box)
        return box

    def box(self, value: str) -> Optional[Checkbox]:
        for b in self.boxes:
            if b.value == value:
                return b
        return None

    def checked_values(self) -> list[str]:
        return [b.value for b in self.boxes if b.checked]

    def sync(self, selected: Iterable[str]) -> None:
        # reflect programmatic selection without firing change handlers
        on = set(selected)
        for b in self.boxes:
            b.checked = b.value in on


class SearchInput(Control):
    def __init__(self, id: str, text: str = ""):
        super().__init__(id)
        self.text = text

    def set_text(self, text: str) -> None:
        self.text = text
        self.emit("input", text)


class Slider(Control):
    def __init__(self, id: str, min: int = 0, max: int = 0, value: int = 0):
        super().__init__(id)
        self.min = min
        self.max = max
        self.value = value

    def set_value(self, value: int) -> None:
        self.value = max(self.min, min(self.max, int(value)))
        self.emit("input", self.value)


class ControlRegistry:
    """Lookup of page controls by element id. Absent controls are tolerated."""

    def __init__(self, controls: Iterable[Control] = ()):
        self._controls: dict[str, Control] = {}
        for c in controls:
            self.register(c)

    def register(self, control: Control) -> Control:
        self._controls[control.id] = control
        return control

    def get(self, id: str) -> Optional[Control]:
        return self._controls.get(id)

    def bind(self, id: str, event: str, handler: Handler) -> Optional[Control]:
        """Attach `handler` to control `id`; returns the control, or None when the page lacks it."""
        c = self.get(id)
        if c is None:
            return None
        c.on(event, handler)
        return c
