"""Terminal prompts and banners for the interactive workers."""

import asyncio
import json
from typing import Any, Dict, Iterable, Tuple

BOX_WIDTH = 62


async def ask(question: str) -> str:
    """Read one answer from stdin without blocking the event loop."""
    answer = await asyncio.to_thread(input, f"   {question}: ")
    return answer.strip()


def banner(title: str, lines: Iterable[str] = ()) -> str:
    rows = ["╔" + "═" * BOX_WIDTH + "╗", f"║  {title}".ljust(BOX_WIDTH + 1) + "║"]
    body = list(lines)
    if body:
        rows.append("╠" + "═" * BOX_WIDTH + "╣")
        rows.extend(f"║  {line}".ljust(BOX_WIDTH + 1) + "║" for line in body)
    rows.append("╚" + "═" * BOX_WIDTH + "╝")
    return "\n".join(rows)


def task_box(title: str, job_key: str, details: Iterable[Tuple[str, Any]]) -> str:
    rows = [
        "┏" + "━" * BOX_WIDTH + "┓",
        f"┃  📥 NEW TASK: {title}".ljust(BOX_WIDTH + 1) + "┃",
        "┗" + "━" * BOX_WIDTH + "┛",
        f"   Job Key: {job_key}",
    ]
    details = list(details)
    if details:
        rows.append("")
        rows.append("   📋 DETAILS:")
        rows.extend(f"      • {label}: {format_value(value)}" for label, value in details)
    return "\n".join(rows)


def decision_box(question: str) -> str:
    width = 55
    return "\n".join(
        [
            "   ╔" + "═" * width + "╗",
            f"   ║  ⚠️  DECISION: {question}".ljust(width + 4) + "║",
            "   ╚" + "═" * width + "╝",
        ]
    )


def format_value(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def format_output(result: Dict[str, Any]) -> str:
    return json.dumps(result, indent=2, default=str)
