"""Append-only audit trail for faucet interactions.

Each line is one JSON-encoded ``AuditEvent`` plus a ``prev_hash`` field
holding the SHA-256 of the previous line, so truncation or in-place edits
are detectable with ``validate_audit_chain``.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path

from lotus_faucet.models import AuditEvent


def _digest(line: str) -> str:
    return hashlib.sha256(line.encode()).hexdigest()


@dataclass
class ChainValidationResult:
    valid: bool
    entries: int = 0
    broken_at_line: int | None = None


def validate_audit_chain(log_path: Path) -> ChainValidationResult:
    """Walk the log and check that every ``prev_hash`` links to its predecessor."""
    text = log_path.read_text().strip()
    if not text:
        return ChainValidationResult(valid=True)

    lines = text.split("\n")
    expected: str | None = None
    for number, line in enumerate(lines, start=1):
        try:
            prev_hash = json.loads(line).get("prev_hash")
        except json.JSONDecodeError:
            return ChainValidationResult(valid=False, entries=len(lines), broken_at_line=number)
        if prev_hash != expected:
            return ChainValidationResult(valid=False, entries=len(lines), broken_at_line=number)
        expected = _digest(line)

    return ChainValidationResult(valid=True, entries=len(lines))


class AuditLogger:
    """Hash-chained JSON Lines writer with size-based rotation."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._last_line = self._read_last_line()

    @classmethod
    def from_env(cls, log_path: str) -> AuditLogger:
        return cls(
            log_path=log_path,
            max_bytes=int(os.environ.get("AUDIT_LOG_MAX_BYTES", "10485760")),
            backup_count=int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", "5")),
        )

    def _read_last_line(self) -> str | None:
        # Resume the chain from an existing file.
        if not self.log_path.exists():
            return None
        text = self.log_path.read_text().strip()
        return text.rsplit("\n", 1)[-1] if text else None

    def _backup(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _rotate_if_needed(self) -> bool:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return False
        self._backup(self._backup_count).unlink(missing_ok=True)
        for index in range(self._backup_count - 1, 0, -1):
            if self._backup(index).exists():
                self._backup(index).rename(self._backup(index + 1))
        self.log_path.rename(self._backup(1))
        return True

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        record = json.loads(event.model_dump_json())

        lock_path = self.log_path.with_name(f".{self.log_path.name}.lock")
        with open(lock_path, "w") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                # A fresh file starts a fresh chain.
                if self._rotate_if_needed():
                    self._last_line = None
                record["prev_hash"] = (
                    _digest(self._last_line) if self._last_line is not None else None
                )
                line = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

        self._last_line = line
