from typing import Any


def truncate_for_display(obj: Any, max_items: int = 10, max_chars: int = 200) -> Any:
    """Сжимает длинные списки и строки (base64 кадров) для печати в консоль."""
    if isinstance(obj, list):
        if len(obj) > max_items:
            first = obj[: max_items // 2]
            last = obj[-max_items // 2 :]
            return {
                "truncated": True,
                "total_length": len(obj),
                "first_items": [truncate_for_display(item, max_items, max_chars) for item in first],
                "last_items": [truncate_for_display(item, max_items, max_chars) for item in last],
            }
        return [truncate_for_display(item, max_items, max_chars) for item in obj]
    if isinstance(obj, dict):
        return {k: truncate_for_display(v, max_items, max_chars) for k, v in obj.items()}
    if isinstance(obj, str) and len(obj) > max_chars:
        return f"{obj[:max_chars]}... ({len(obj)} chars)"
    return obj
