"""
Video script variants and the classifier that maps the model's first answer to one of them.
Adding a variant means adding an enum member here and a field prompt map in prompt_builders.
"""

from enum import Enum

from utils import LogSink


class VideoGenType(str, Enum):
    """Closed set of video script variants the model may choose from."""

    TopicVideo = "TopicVideo"
    TextMessageVideo = "TextMessageVideo"
    RatherVideo = "RatherVideo"
    RankVideo = "RankVideo"
    QuizVideo = "QuizVideo"


DEFAULT_VIDEO_TYPE = VideoGenType.TopicVideo


def match_video_type(text: str | None) -> VideoGenType | None:
    """Case-insensitive exact match against the known tags. None when nothing matches."""
    if not isinstance(text, str):
        return None
    wanted = text.strip().lower()
    for video_type in VideoGenType:
        if video_type.value.lower() == wanted:
            return video_type
    return None


def classify_video_type(text: str | None, log: LogSink, label: str = "AI") -> VideoGenType:
    """
    Resolve the classification turn's answer to a VideoGenType.

    Unwrapping (e.g. pulling "type" out of a JSON object) is the adapter's job and must happen
    before this is called. An unknown answer is not an error: it logs once and falls back to
    TopicVideo.

    Args:
        text: The (unwrapped) classification reply.
        log: Progress sink.
        label: Prefix for log lines, e.g. "OpenAI / gpt-4o-mini".
    """
    matched = match_video_type(text)
    if matched is None:
        log.log(f"[*] Invalid video type (defaulting to topic): '{text}'")
        matched = DEFAULT_VIDEO_TYPE
    log.log(f"({label}) AI said video type is '{matched.value}'")
    return matched
