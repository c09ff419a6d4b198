"""Retained-mode widgets driven by state snapshots."""

from rad.tui.rm.widget import (
    Label,
    LabelProps,
    Page,
    PageProps,
    RetainedView,
    Shortcuts,
    ShortcutsProps,
    TextArea,
    TextAreaProps,
    Widget,
    Window,
    WindowProps,
)

__all__ = [
    "Label",
    "LabelProps",
    "Page",
    "PageProps",
    "RetainedView",
    "Shortcuts",
    "ShortcutsProps",
    "TextArea",
    "TextAreaProps",
    "Widget",
    "Window",
    "WindowProps",
]
