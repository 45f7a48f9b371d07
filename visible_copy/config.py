import os
from dataclasses import dataclass

from dotenv import load_dotenv

from visible_copy.types import CopyMode


@dataclass
class PickerConfig:
    """Configuration for picker sessions and the live browser bridge."""
    acknowledgment_delay: float = 1.0
    attribute_preview_limit: int = 40
    breadcrumb_depth: int = 5
    cancel_key: str = "Escape"
    default_mode: CopyMode = CopyMode.HTML
    notification_fade: float = 0.3
    parse_delay: float = 2.0
    poll_interval: float = 0.05
    text_preview_limit: int = 50
    tree_max_depth: int = 15

    def __post_init__(self):
        self.default_mode = CopyMode(self.default_mode)
        if self.breadcrumb_depth < 1:
            raise ValueError("breadcrumb_depth must be at least 1")
        if self.tree_max_depth < 0:
            raise ValueError("tree_max_depth must not be negative")
        if self.text_preview_limit < 1 or self.attribute_preview_limit < 1:
            raise ValueError("preview limits must be positive")
        if min(self.acknowledgment_delay, self.notification_fade, self.parse_delay) < 0:
            raise ValueError("delays must not be negative")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if not self.cancel_key:
            raise ValueError("cancel_key must not be empty")

    @classmethod
    def from_env(cls) -> "PickerConfig":
        """
        Create configuration from environment variables.

        Reads VISIBLE_COPY_* variables (a .env file is honoured); anything
        unset keeps its default.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        load_dotenv()
        defaults = cls()

        def number(name: str, default: float) -> float:
            raw = os.environ.get(name)
            if raw is None or raw == "":
                return default
            try:
                return float(raw)
            except ValueError:
                raise ValueError(f"{name} must be a number, got {raw!r}")

        def integer(name: str, default: int) -> int:
            value = number(name, default)
            if not float(value).is_integer():
                raise ValueError(f"{name} must be a whole number, got {os.environ.get(name)!r}")
            return int(value)

        return cls(
            acknowledgment_delay=number("VISIBLE_COPY_ACK_DELAY", defaults.acknowledgment_delay),
            attribute_preview_limit=integer(
                "VISIBLE_COPY_ATTRIBUTE_PREVIEW_LIMIT", defaults.attribute_preview_limit
            ),
            breadcrumb_depth=integer("VISIBLE_COPY_BREADCRUMB_DEPTH", defaults.breadcrumb_depth),
            cancel_key=os.environ.get("VISIBLE_COPY_CANCEL_KEY") or defaults.cancel_key,
            default_mode=os.environ.get("VISIBLE_COPY_DEFAULT_MODE") or defaults.default_mode,
            notification_fade=number("VISIBLE_COPY_NOTIFICATION_FADE", defaults.notification_fade),
            parse_delay=number("VISIBLE_COPY_PARSE_DELAY", defaults.parse_delay),
            poll_interval=number("VISIBLE_COPY_POLL_INTERVAL", defaults.poll_interval),
            text_preview_limit=integer("VISIBLE_COPY_TEXT_PREVIEW_LIMIT", defaults.text_preview_limit),
            tree_max_depth=integer("VISIBLE_COPY_TREE_MAX_DEPTH", defaults.tree_max_depth),
        )
