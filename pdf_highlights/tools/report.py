import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pdf_highlights.core.collector import group_by_color
from pdf_highlights.core.strategies import PRESET_DESCRIPTIONS
from pdf_highlights.core.types import HighlightResult


def _location(result: HighlightResult) -> str:
    r = result.region
    return f"[{r.x:.2f},{r.y:.2f},{r.x1:.2f},{r.y1:.2f}]"


def build_report(
    results: Sequence[HighlightResult],
    file_name: str = "",
    preset: str = "default",
    dpi: Optional[int] = None,
) -> Dict[str, Any]:
    groups = group_by_color(results)
    report: Dict[str, Any] = {
        "fileName": file_name,
        "totalHighlights": len(results),
        "extractionDate": datetime.now().isoformat(timespec="seconds"),
        "extractionMethod": PRESET_DESCRIPTIONS.get(preset, preset),
    }
    if dpi is not None:
        report["dpi"] = dpi
    report["summary"] = {color.value.lower(): len(items) for color, items in groups.items()}
    report["highlightsByColor"] = {
        color.value.lower(): [r.to_dict() for r in items] for color, items in groups.items()
    }
    return report


def write_report(report: Dict[str, Any], output: Path) -> Path:
    output = Path(output)
    output.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
    return output


def format_summary(results: Sequence[HighlightResult]) -> str:
    lines: List[str] = ["=" * 60, "EXTRACTION RESULTS", "=" * 60]
    if not results:
        lines += [
            "No highlights found matching the target colors (green, yellow, purple).",
            "",
            "Possible reasons:",
            "1. The PDF doesn't contain annotation-based highlights",
            "2. Highlight colors don't match the target colors",
            "3. The highlighted text is an image (try --ocr)",
        ]
        return "\n".join(lines)

    groups = group_by_color(results)
    lines.append("SUMMARY:")
    lines.append(f"Total highlights found: {len(results)}")
    for color, items in groups.items():
        lines.append(f"{color.value} highlights: {len(items)}")

    lines += ["", "DETAILED RESULTS:"]
    for color, items in groups.items():
        lines += ["", f"{color.value} HIGHLIGHTS:", "-" * 40]
        for i, item in enumerate(items, 1):
            lines.append(f"{i}. Page {item.page}")
            lines.append(f'   Text: "{item.text}"')
            lines.append(f"   Location: {_location(item)}")
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"
