from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deckpress.progress import ProgressSnapshot


def _json_dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _default_progress_enabled(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass
class ProgressPrinter:
    """Render single-line progress updates in a TTY-friendly way.

    Instances are callable, so one can be handed straight to a pipeline as
    its on_progress callback.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    enabled: bool | None = None
    keep_history: bool = False
    history: list[str] = field(default_factory=list, init=False)
    _last_len: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.enabled is None:
            self.enabled = _default_progress_enabled(self.stream)

    def __call__(self, snapshot: ProgressSnapshot) -> None:
        label = f"[{snapshot.current}/{snapshot.total}] {snapshot.label}"
        self.update(label, final=snapshot.current >= snapshot.total)

    def update(self, label: str, *, final: bool = False) -> None:
        if self.keep_history:
            self.history.append(label)

        if not self.enabled:
            if final:
                self.stream.write(label + os.linesep)
                self.stream.flush()
            return

        padding = max(0, self._last_len - len(label))
        self.stream.write(f"\r{label}{' ' * padding}")
        if final:
            self.stream.write(os.linesep)
            self._last_len = 0
        else:
            self._last_len = len(label)
        self.stream.flush()


def resolve_output_path(path_value: str | Path | None) -> Path | None:
    if path_value is None:
        return None
    return Path(path_value).expanduser().resolve()


def write_json_output(payload: Any, out_path: str | Path | None = None) -> Path | None:
    """Write payload as JSON to out_path, or to stdout when no path is given."""
    resolved = resolve_output_path(out_path)
    if resolved is None:
        sys.stdout.write(_json_dump(payload))
        return None
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(_json_dump(payload), encoding="utf-8")
    return resolved


def exit_with_message(message: str, *, code: int = 0) -> None:
    stream = sys.stderr if code else sys.stdout
    stream.write(message + os.linesep)
    stream.flush()
    raise SystemExit(code)
