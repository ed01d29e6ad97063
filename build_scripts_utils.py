"""
Shared utilities for script generation: parsing model replies, eliciting fields turn by turn,
and the VideoDocument produced at the end of a generate() call.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from conversation import ConversationHistory
from script_types import VideoGenType, match_video_type
from utils import LogSink


def clean_json_response(content: str) -> str:
    """Remove markdown code blocks from JSON response."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def extract_json_block(text: str) -> Any:
    """
    Pull the outermost {...} or [...] out of a reply that wraps JSON in prose
    (e.g. 'Sure! Here it is: {"title": "x"} Hope this helps').
    Raises json.JSONDecodeError if no parseable block is found.
    """
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        start = text.find(open_ch)
        end = text.rfind(close_ch)
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                continue
    raise json.JSONDecodeError("No JSON object or array found", text, 0)


def parse_field_response(raw: str, key: str, log: LogSink, label: str = "AI") -> Any:
    """
    Turn one field turn's reply into the value stored under `key`.

    - Valid JSON object with a non-null `key` -> that nested value
    - Any other valid JSON                     -> the parsed value as-is
    - Not JSON                                 -> trimmed raw text (logged, never raised)
    """
    cleaned = clean_json_response(raw or "")
    try:
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError:
            parsed = extract_json_block(cleaned)
    except json.JSONDecodeError as e:
        log.log(f"({label}) Error parsing JSON response for field '{key}': {e.msg}. Using raw text.")
        return (raw or "").strip()

    if isinstance(parsed, dict) and parsed.get(key) is not None:
        return parsed[key]
    return parsed


@dataclass
class VideoDocument:
    """The generated video script: its type plus one entry per elicited field, in order."""

    type: VideoGenType
    fields: dict[str, Any] = field(default_factory=dict)

    def set_field(self, key: str, value: Any) -> None:
        if key == "type":
            raise ValueError("'type' is reserved for the video type")
        self.fields[key] = value

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, **self.fields}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VideoDocument":
        video_type = match_video_type(data.get("type"))
        if video_type is None:
            raise ValueError(f"Invalid video type: '{data.get('type')}'")
        return cls(type=video_type, fields={k: v for k, v in data.items() if k != "type"})

    @classmethod
    def from_json(cls, text: str) -> "VideoDocument":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Video script JSON must be an object")
        return cls.from_dict(data)


def load_video_document(path: str | Path) -> VideoDocument:
    """Load a script JSON written by a previous run (or by hand)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Video script file '{path}' not found")
    with open(path, "r", encoding="utf-8") as f:
        return VideoDocument.from_json(f.read())


def elicit_fields(
    adapter: Any,
    history: ConversationHistory,
    document: VideoDocument,
    field_prompts: Mapping[str, str],
    log: LogSink,
    label: str = "AI",
) -> VideoDocument:
    """
    Ask for each field in declaration order, one turn per field, storing results on `document`.
    Prompts may rely on earlier fields being in the conversation, so order is never changed.
    A reply that fails to parse is stored as raw text and generation moves on.

    Raises:
        ValueError: a field is named "type" (reserved for the video type); checked before any turn.
    """
    if "type" in field_prompts:
        raise ValueError("'type' is reserved for the video type and cannot be asked for as a field")
    for key, prompt in field_prompts.items():
        log.log(f"({label}) Will ask AI for field '{key}' with prompt '{prompt}'")
        res = adapter.run_turn(history, prompt, key=key)
        document.set_field(key, parse_field_response(res, key, log, label))
        log.log(f"({label}) AI said for field '{key}' is '{res}'")
    return document
