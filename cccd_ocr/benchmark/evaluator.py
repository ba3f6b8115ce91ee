"""Accuracy benchmarking for CCCD field extraction.

Compares extracted fields against a labeled set of card photos and
computes precision, recall, F1 score and accuracy per field. Used to
tune the extraction heuristics against real samples.
"""

import csv
import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from cccd_ocr.extraction.cccd_extractor import CAMEL_CASE_KEYS, CCCDInfo
from cccd_ocr.utils.logger import get_logger

logger = get_logger(__name__)

BENCHMARK_FIELDS: tuple[str, ...] = ("full_name", "national_id", "dob")

_FIELD_BY_CAMEL_KEY = {camel: name for name, camel in CAMEL_CASE_KEYS.items()}

_DMY_DATE = re.compile(r"([0-9]{1,2})[/\-.]([0-9]{1,2})[/\-.]([0-9]{4})")
_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{1,2})-([0-9]{1,2})")


@dataclass
class FieldMetrics:
    """Precision, recall, F1, and accuracy metrics for a single field.

    Args:
        field_name: Name of the extracted field being measured.
    """

    field_name: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    exact_matches: int = 0
    total: int = 0

    @property
    def precision(self) -> float:
        """Fraction of predicted values that are correct."""
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        """Fraction of expected values that were correctly predicted."""
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        """Harmonic mean of precision and recall."""
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)

    @property
    def accuracy(self) -> float:
        """Fraction of exact string matches."""
        if self.total == 0:
            return 0.0
        return self.exact_matches / self.total


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all cards and fields."""

    total_documents: int
    successful_documents: int
    overall_accuracy: float
    overall_f1: float
    field_metrics: dict[str, FieldMetrics]
    errors: list[str] = field(default_factory=list)


def normalize_value(field_name: str, value: object) -> str:
    """Bring a field value into the form the extractor produces.

    Names are case-folded with whitespace collapsed, IDs lose their
    grouping spaces, and dates in ``DD/MM/YYYY`` become ``YYYY-MM-DD``.
    """
    text = " ".join(str(value).split()).casefold()
    if field_name == "national_id":
        return text.replace(" ", "")
    if field_name == "dob":
        dmy = _DMY_DATE.fullmatch(text)
        if dmy:
            day, month, year = (int(p) for p in dmy.groups())
            return f"{year:04d}-{month:02d}-{day:02d}"
        iso = _ISO_DATE.fullmatch(text)
        if iso:
            year, month, day = (int(p) for p in iso.groups())
            return f"{year:04d}-{month:02d}-{day:02d}"
    return text


def prediction_fields(prediction: CCCDInfo | dict[str, str]) -> dict[str, str]:
    """Key a prediction by snake_case field name.

    Accepts a :class:`CCCDInfo`, its camelCase ``to_dict()`` output (as
    saved to JSON by a batch run), or a dict already keyed by field name.
    """
    if isinstance(prediction, CCCDInfo):
        prediction = prediction.to_dict()
    return {
        _FIELD_BY_CAMEL_KEY.get(key, key): value
        for key, value in prediction.items()
        if value is not None
    }


class Evaluator:
    """Evaluates extraction predictions against ground truth labels.

    A prediction counts as an exact match when it equals the label after
    trimming and case folding, and as a true positive when the two agree
    after field-aware normalization (see :func:`normalize_value`).

    Args:
        fields: Fields to score; others in the labels are ignored.
    """

    def __init__(self, fields: tuple[str, ...] = BENCHMARK_FIELDS) -> None:
        self.fields = fields

    def evaluate(
        self,
        predictions: dict[str, CCCDInfo | dict[str, str]],
        ground_truth: dict[str, dict[str, str]],
    ) -> BenchmarkResult:
        """Compare predictions against ground truth and compute metrics.

        Args:
            predictions: Mapping of filename to extracted fields, either a
                :class:`CCCDInfo` or a dict (see :func:`prediction_fields`).
            ground_truth: Mapping of filename to expected field values.

        Returns:
            Aggregated benchmark results with per-field metrics.
        """
        field_metrics: dict[str, FieldMetrics] = {}
        errors: list[str] = []
        missing_count = 0

        for filename, expected in ground_truth.items():
            scored = {k: v for k, v in expected.items() if k in self.fields}
            predicted = predictions.get(filename)
            if predicted is None:
                errors.append(f"Missing prediction for {filename}")
                missing_count += 1
            else:
                predicted = prediction_fields(predicted)

            for field_name, expected_value in scored.items():
                metrics = field_metrics.setdefault(field_name, FieldMetrics(field_name))
                metrics.total += 1

                pred_value = (predicted or {}).get(field_name)
                if pred_value is None:
                    metrics.false_negatives += 1
                    continue

                if str(pred_value).strip().casefold() == str(expected_value).strip().casefold():
                    metrics.true_positives += 1
                    metrics.exact_matches += 1
                elif normalize_value(field_name, pred_value) == normalize_value(
                    field_name, expected_value
                ):
                    metrics.true_positives += 1
                else:
                    metrics.false_positives += 1

        all_f1 = [m.f1 for m in field_metrics.values() if m.total > 0]
        all_acc = [m.accuracy for m in field_metrics.values() if m.total > 0]

        logger.info(
            "Evaluated %d cards (%d missing predictions)",
            len(ground_truth),
            missing_count,
        )
        return BenchmarkResult(
            total_documents=len(ground_truth),
            successful_documents=len(ground_truth) - missing_count,
            overall_accuracy=sum(all_acc) / len(all_acc) if all_acc else 0.0,
            overall_f1=sum(all_f1) / len(all_f1) if all_f1 else 0.0,
            field_metrics=field_metrics,
            errors=errors,
        )

    def generate_report(
        self,
        result: BenchmarkResult,
        output_path: Path | None = None,
        target_accuracy: float = 0.9,
    ) -> str:
        """Generate a human-readable benchmark report.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.
            target_accuracy: Accuracy needed for the PASSED verdict.

        Returns:
            Formatted report string.
        """
        lines = [
            "=" * 60,
            "CCCD EXTRACTION BENCHMARK",
            "=" * 60,
            f"Total Cards:          {result.total_documents}",
            f"With Predictions:     {result.successful_documents}",
            f"Overall Accuracy:     {result.overall_accuracy:.2%}",
            f"Overall F1 Score:     {result.overall_f1:.3f}",
            "",
            "Field-Level Metrics:",
            "-" * 60,
            f"{'Field':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Accuracy':>10}",
            "-" * 60,
        ]

        for name, metrics in sorted(result.field_metrics.items()):
            lines.append(
                f"{name:<20} {metrics.precision:>10.2%} {metrics.recall:>10.2%} "
                f"{metrics.f1:>10.3f} {metrics.accuracy:>10.2%}"
            )

        target_met = result.overall_accuracy >= target_accuracy
        lines.extend(
            [
                "-" * 60,
                "",
                f"Target: >{target_accuracy:.0%} accuracy - "
                f"{'PASSED' if target_met else 'FAILED'}",
                "=" * 60,
            ]
        )

        if result.errors:
            lines.append("")
            lines.append("Errors:")
            for error in result.errors:
                lines.append(f"  - {error}")

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report, encoding="utf-8")
            logger.info("Report written to %s", output_path)

        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, str]]:
    """Load ground truth labels from a JSON or CSV file.

    JSON format: ``{"filename": {"field": "value", ...}, ...}``
    CSV format: rows with a ``filename`` column and field value columns.
    Both are read as UTF-8 since names carry Vietnamese diacritics.

    Args:
        path: Path to the ground truth file.

    Returns:
        Mapping of filename to field-value pairs.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    if path.suffix == ".csv":
        gt: dict[str, dict[str, str]] = {}
        with open(path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                filename = row.pop("filename")
                gt[filename] = {k: v for k, v in row.items() if v}
        return gt

    raise ValueError(f"Unsupported ground truth format: {path.suffix}")
