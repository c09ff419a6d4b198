"""Immediate-mode composition: the ``Ui`` builder, its context and widgets."""

from rad.tui.im.context import (
    Context,
    InputQueue,
    WidgetId,
    WidgetMemory,
    WidgetState,
)
from rad.tui.im.ui import Ui, Window
from rad.tui.im.widget import (
    Bar,
    Borders,
    Column,
    Columns,
    InnerResponse,
    Label,
    Panes,
    Popup,
    Response,
    Separator,
    Shortcuts,
    Table,
    TextEdit,
    TextView,
    Widget,
    render_block,
)

__all__ = [
    "Bar",
    "Borders",
    "Column",
    "Columns",
    "Context",
    "InnerResponse",
    "InputQueue",
    "Label",
    "Panes",
    "Popup",
    "Response",
    "Separator",
    "Shortcuts",
    "Table",
    "TextEdit",
    "TextView",
    "Ui",
    "Widget",
    "WidgetId",
    "WidgetMemory",
    "WidgetState",
    "Window",
    "render_block",
]
