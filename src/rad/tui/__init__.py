"""rad-tui: message-driven terminal UI framework with immediate-mode widgets."""

# Message channel and state store
from rad.tui.channel import Channel, Receiver, Sender, send_quietly
from rad.tui.store import STORE_TICK_RATE, Exit, State, StateValue, Store

# Termination
from rad.tui.task import Interrupted, Terminator, install_signal_handlers

# Errors and configuration
from rad.tui.config import Config
from rad.tui.errors import ChannelClosed, ReceiverTaken, TerminalError, TuiError

# Input
from rad.tui.event import Event, KeyEvent, PasteEvent, ResizeEvent, key_event
from rad.tui.input_buffer import InputBuffer
from rad.tui.keys import Key, KeyId, KeyMatcher, matches_key, parse_key

# Frame, style and layout
from rad.tui.buffer import Buffer, Cell, Frame, Rect
from rad.tui.layout import Constraint, Layout
from rad.tui.style import DEFAULT_THEME, Span, Style, Theme

# Terminal
from rad.tui.terminal import ProcessTerminal, Renderer, Terminal, TerminalSession
from rad.tui.viewport import Viewport

# Composition
from rad.tui.im import Context, Ui, WidgetMemory, WidgetState, Window
from rad.tui.view import ImmediateView, View, compose_frame

# Frontend
from rad.tui.frontend import Frontend, LoopState, im, run

from rad.tui.selection import Selection

__all__ = [
    # Channel and store
    "Channel",
    "Receiver",
    "Sender",
    "send_quietly",
    "STORE_TICK_RATE",
    "Exit",
    "State",
    "StateValue",
    "Store",
    # Termination
    "Interrupted",
    "Terminator",
    "install_signal_handlers",
    # Errors and configuration
    "Config",
    "ChannelClosed",
    "ReceiverTaken",
    "TerminalError",
    "TuiError",
    # Input
    "Event",
    "KeyEvent",
    "PasteEvent",
    "ResizeEvent",
    "key_event",
    "InputBuffer",
    "Key",
    "KeyId",
    "KeyMatcher",
    "matches_key",
    "parse_key",
    # Frame, style and layout
    "Buffer",
    "Cell",
    "Frame",
    "Rect",
    "Constraint",
    "Layout",
    "DEFAULT_THEME",
    "Span",
    "Style",
    "Theme",
    # Terminal
    "ProcessTerminal",
    "Renderer",
    "Terminal",
    "TerminalSession",
    "Viewport",
    # Composition
    "Context",
    "Ui",
    "WidgetMemory",
    "WidgetState",
    "Window",
    "ImmediateView",
    "View",
    "compose_frame",
    # Frontend
    "Frontend",
    "LoopState",
    "im",
    "run",
    "Selection",
]
