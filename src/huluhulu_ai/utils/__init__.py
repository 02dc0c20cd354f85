from huluhulu_ai.utils.json_repair import safe_parse_json
from huluhulu_ai.utils.sse import format_done_frame, format_sse_frame, parse_sse_frames

__all__ = [
    "safe_parse_json",
    "format_sse_frame",
    "format_done_frame",
    "parse_sse_frames",
]
