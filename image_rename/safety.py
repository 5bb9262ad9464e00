"""
Safety checks and file operation safeguards.
"""

from collections.abc import Collection
from pathlib import Path
from typing import Any

from .constants import REASON_NAME_UNCHANGED, REASON_TARGET_EXISTS
from .core import SafetyChecker

# Characters Windows refuses in a file name; "/" also covers POSIX.
INVALID_NAME_CHARACTERS = frozenset('<>:"/\\|?*\0')
MAX_NAME_BYTES = 255
RESERVED_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)


class FileSafetyChecker(SafetyChecker):
    """Decides whether a rename may touch the filesystem.

    A rename never overwrites: an existing target is reported as skipped.
    """

    def check_rename_safety(
        self,
        source: Path,
        target: Path,
        claimed: Collection[Path] = (),
        vacated: Collection[Path] = (),
    ) -> dict[str, Any]:
        """Check if rename operation is safe.

        ``claimed`` and ``vacated`` describe a dry run so far: targets earlier
        entries would occupy, and sources they would have moved away.
        """
        result: dict[str, Any] = {
            "safe": True,
            "skipped": False,
            "reason": None,
            "errors": [],
        }

        # Exact, case-sensitive comparison
        if source.name == target.name and source.parent == target.parent:
            result["safe"] = False
            result["skipped"] = True
            result["reason"] = REASON_NAME_UNCHANGED
            return result

        if not source.exists():
            result["safe"] = False
            result["errors"].append(f"Source file does not exist: {source}")
            return result

        occupied = target.exists() and target not in vacated
        if occupied or target in claimed:
            result["safe"] = False
            result["skipped"] = True
            result["reason"] = REASON_TARGET_EXISTS
            return result

        if not target.parent.is_dir():
            result["safe"] = False
            result["errors"].append(f"Target directory does not exist: {target.parent}")
            return result

        return result

    def validate_filename(self, filename: str) -> list[str]:
        """Reasons ``filename`` would not be portable; empty when it is fine."""
        problems = []

        bad = sorted(INVALID_NAME_CHARACTERS.intersection(filename))
        if bad:
            problems.append("contains " + " ".join(repr(c) for c in bad))

        if len(filename.encode("utf-8")) > MAX_NAME_BYTES:
            problems.append(f"longer than {MAX_NAME_BYTES} bytes")

        stem = filename.split(".", 1)[0].upper()
        if stem in RESERVED_NAMES:
            problems.append(f"{stem} is reserved on Windows")

        if filename != filename.strip(" ."):
            problems.append("starts or ends with a space or dot")

        return problems
