"""Batch preview and rename of image files."""

from collections.abc import Callable, Iterable
import logging
from pathlib import Path

from .analyzer import ImageAnalyzer
from .constants import REASON_TARGET_EXISTS
from .core import (
    BatchError,
    ProgressEvent,
    RenameConfig,
    RenameOutcome,
    RenamePlan,
    RenameReport,
)
from .metadata import collect_images, read_metadata
from .safety import FileSafetyChecker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
Target = Path | str | Iterable[Path | str]


class FileRenamer:
    """Drives images through the analyzer and renames them on disk.

    Create one instance per operation. Files are handled one at a time in
    input order; a failing file never stops the batch.
    """

    def __init__(
        self,
        config: RenameConfig,
        analyzer: ImageAnalyzer | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.config = config
        self.analyzer = analyzer or ImageAnalyzer(config)
        self.progress_callback = progress_callback
        self.safety_checker = FileSafetyChecker()

    def scan(self, target: Target) -> list[RenamePlan]:
        """Analyze every image in ``target`` and build a plan entry for each."""
        paths = collect_images(target, self.config.supported_extensions)
        plans = []
        for index, path in enumerate(paths, 1):
            plans.append(self._plan_for(path))
            self._emit(ProgressEvent(index, len(paths), _percent(index, len(paths)), path.name))
        return plans

    def preview_rename(self, target: Target) -> list[RenamePlan]:
        return [plan for plan in self.scan(target) if not plan.error]

    def perform_rename(
        self,
        target: Target | None = None,
        dry_run: bool = False,
        plans: list[RenamePlan] | None = None,
    ) -> RenameReport:
        """Rename the images in ``target``.

        Plans from an earlier preview are reused as-is so images are not sent
        to the model twice; only files without a plan are analyzed again.
        """
        if plans is None:
            if target is None:
                raise BatchError("Nothing to rename: pass a target or preview plans")
            plans = self.scan(target)
        elif target is not None:
            plans = self._match_plans(target, plans)

        report = RenameReport()
        claimed: set[Path] = set()
        vacated: set[Path] = set()
        processed = skipped = success = failed = 0
        total = len(plans)

        for index, plan in enumerate(plans, 1):
            outcome = self._execute(plan, dry_run, claimed, vacated)
            report.outcomes.append(outcome)

            if outcome.skipped:
                skipped += 1
            else:
                processed += 1
                if outcome.success:
                    success += 1
                else:
                    failed += 1

            self._emit(
                ProgressEvent(
                    current=index,
                    total=total,
                    percent=_percent(index, total),
                    file_name=plan.original_name,
                    processed=processed,
                    skipped=skipped,
                    success=success,
                    failed=failed,
                )
            )

        return report

    def rename_single_file(self, file_path: Path | str, new_name: str) -> RenameOutcome:
        """Rename one file to ``new_name`` (extension included) in place."""
        source = Path(file_path)
        try:
            if new_name in ("", ".", "..") or Path(new_name).name != new_name:
                raise ValueError(f"Invalid file name: {new_name!r}")
            target = source.with_name(new_name)
        except ValueError as e:
            return RenameOutcome(original_path=source, original_name=source.name, error=str(e))

        outcome = self._rename(source, target, dry_run=False)
        if outcome.reason == REASON_TARGET_EXISTS:
            outcome.success = False
            outcome.error = outcome.reason
        return outcome

    def _match_plans(self, target: Target, plans: list[RenamePlan]) -> list[RenamePlan]:
        by_path = {plan.original_path: plan for plan in plans}
        matched = []
        for path in collect_images(target, self.config.supported_extensions):
            plan = by_path.get(path)
            if plan is None:
                logger.info("%s: no preview entry, analyzing again", path.name)
                plan = self._plan_for(path)
            matched.append(plan)
        return matched

    def _plan_for(self, path: Path) -> RenamePlan:
        try:
            metadata = read_metadata(path)
            result = self.analyzer.suggest_name(path)
        except Exception as e:
            logger.warning("%s: %s", path.name, e)
            return RenamePlan(original_path=path, original_name=path.name, error=str(e))

        suggested_name = result.suggested_base_name + path.suffix
        is_same_name = path.name == suggested_name
        return RenamePlan(
            original_path=path,
            original_name=path.name,
            suggested_name=suggested_name,
            is_same_name=is_same_name,
            would_rename=not is_same_name,
            source=result.source,
            metadata=metadata,
        )

    def _execute(
        self, plan: RenamePlan, dry_run: bool, claimed: set[Path], vacated: set[Path]
    ) -> RenameOutcome:
        if plan.error or not plan.suggested_name:
            return RenameOutcome(
                original_path=plan.original_path,
                original_name=plan.original_name,
                error=plan.error or "no suggested name",
            )
        target = plan.original_path.with_name(plan.suggested_name)
        return self._rename(plan.original_path, target, dry_run, claimed, vacated)

    def _rename(
        self,
        source: Path,
        target: Path,
        dry_run: bool,
        claimed: set[Path] | None = None,
        vacated: set[Path] | None = None,
    ) -> RenameOutcome:
        outcome = RenameOutcome(original_path=source, original_name=source.name)
        claimed = set() if claimed is None else claimed
        vacated = set() if vacated is None else vacated

        verdict = self.safety_checker.check_rename_safety(source, target, claimed, vacated)
        if verdict["skipped"]:
            outcome.success = True
            outcome.skipped = True
            outcome.reason = verdict["reason"]
            logger.info("%s: skipped, %s", source.name, verdict["reason"])
            return outcome
        if not verdict["safe"]:
            outcome.error = verdict["errors"][0]
            return outcome

        outcome.new_path = target
        outcome.new_name = target.name

        if dry_run:
            claimed.add(target)
            vacated.add(source)
            outcome.success = True
            outcome.dry_run = True
            return outcome

        try:
            source.rename(target)
        except OSError as e:
            logger.warning("%s: rename failed: %s", source.name, e)
            outcome.error = str(e)
            return outcome

        outcome.success = True
        logger.info("Renamed %s -> %s", source.name, target.name)
        return outcome

    def _emit(self, event: ProgressEvent) -> None:
        if self.progress_callback is not None:
            self.progress_callback(event)


def _percent(current: int, total: int) -> int:
    return round(current / total * 100) if total else 100
