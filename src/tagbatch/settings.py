from dataclasses import dataclass


@dataclass
class EngineSettings:
    """Tunable settings for a change session."""

    # Edits closer together than this (measured from the last checkpoint push) share one undo step
    debounce_ms: int = 250
    max_undo_depth: int = 100
    # Shown in text controls when selected files disagree
    mixed_sentinel: str = "..."

    @property
    def debounce_seconds(self) -> float:
        """Debounce threshold in seconds (clock units)."""
        return self.debounce_ms / 1000.0
