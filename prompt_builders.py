"""
Prompt catalog for video script generation.
Holds the default system prompt, the classification prompt, and one ordered field prompt map
per video type. The engine only reads these; field order is the order fields are asked for,
and later prompts may refer to fields the model already produced earlier in the conversation.
"""
from types import MappingProxyType
from typing import Mapping

from script_types import VideoGenType

DEFAULT_SYSTEM_PROMPT = """You are a writer of short-form vertical videos (YouTube Shorts, TikTok, Reels).
You turn a viewer's comment or idea into a short, punchy video script of about 30-60 seconds.
Keep narration conversational and easy to read aloud by a text-to-speech voice.
Never use emojis, hashtags, or markdown in narration. When asked for a field, answer ONLY with that field."""


def get_video_type_descriptions() -> str:
    """One line per video type so the model knows what each tag means."""
    return """- TopicVideo: a narrated explainer about a single topic, fact, or story.
- TextMessageVideo: a fictional text message conversation between two people.
- RatherVideo: a series of "Would you rather" questions with two options each.
- RankVideo: a ranked countdown list of items.
- QuizVideo: a multiple-choice quiz with questions and answers."""


def build_classification_prompt(user_prompt: str, json_object: bool = False) -> str:
    """
    First turn of every conversation: pick the video type for the user's prompt.

    Args:
        user_prompt: The viewer comment / idea the video is about.
        json_object: If True, ask for {"type": "..."} (for backends that force JSON output
            on this turn); otherwise ask for the bare tag.
    """
    if json_object:
        answer_format = 'Respond ONLY with a JSON object of the form {"type": "<VideoType>"}.'
    else:
        answer_format = "Respond ONLY with the video type name, nothing else."
    return f"""Choose the best video type for the prompt below. The available video types are:
{get_video_type_descriptions()}

{answer_format}

Prompt: {user_prompt}"""


def _json_field(field: str, description: str, example: str) -> str:
    return f"""Give the '{field}' for the video: {description}
Respond ONLY with JSON in this exact shape: {{"{field}": {example}}}"""


_COMMON_FIELDS = {
    "title": _json_field(
        "title",
        "a short, catchy video title (under 60 characters).",
        '"..."',
    ),
    "description": _json_field(
        "description",
        "a one or two sentence video description for the upload page.",
        '"..."',
    ),
}

TOPIC_VIDEO_PROMPTS = {
    **_COMMON_FIELDS,
    "start_script": _json_field(
        "start_script",
        "the opening hook line that grabs attention in the first three seconds.",
        '"..."',
    ),
    "script": _json_field(
        "script",
        "the full narration for the body of the video, continuing from the hook.",
        '"..."',
    ),
    "end_script": _json_field(
        "end_script",
        "a closing line that wraps up the video and asks viewers to follow.",
        '"..."',
    ),
    "images": _json_field(
        "images",
        "3 to 6 short image search queries that illustrate the script, in order.",
        '["...", "..."]',
    ),
}

TEXT_MESSAGE_VIDEO_PROMPTS = {
    **_COMMON_FIELDS,
    "other_party_name": _json_field(
        "other_party_name",
        "the name shown at the top of the chat for the other person.",
        '"..."',
    ),
    "script": _json_field(
        "script",
        "the text message conversation. 'self' is true for messages sent by the phone owner.",
        '[{"message": "...", "self": true}, {"message": "...", "self": false}]',
    ),
}

RATHER_VIDEO_PROMPTS = {
    **_COMMON_FIELDS,
    "start_script": _json_field(
        "start_script",
        "the opening line introducing the would you rather game.",
        '"..."',
    ),
    "questions": _json_field(
        "questions",
        "5 would you rather questions. p1 and p2 are the made-up percentages (summing to 100) of people choosing each option.",
        '[{"option1": "...", "option2": "...", "p1": 50, "p2": 50}]',
    ),
    "end_script": _json_field(
        "end_script",
        "a closing line asking viewers which option they picked.",
        '"..."',
    ),
}

RANK_VIDEO_PROMPTS = {
    **_COMMON_FIELDS,
    "start_script": _json_field(
        "start_script",
        "the opening line announcing what is being ranked.",
        '"..."',
    ),
    "ranks": _json_field(
        "ranks",
        "5 ranked items from last place to first place, each with a short narration line.",
        '[{"rank": 5, "text": "...", "image": "image search query"}]',
    ),
    "end_script": _json_field(
        "end_script",
        "a closing line asking viewers whether they agree with the ranking.",
        '"..."',
    ),
}

QUIZ_VIDEO_PROMPTS = {
    **_COMMON_FIELDS,
    "start_script": _json_field(
        "start_script",
        "the opening line challenging viewers to take the quiz.",
        '"..."',
    ),
    "questions": _json_field(
        "questions",
        "5 multiple-choice questions, each with 4 answers and the index (0-3) of the correct one.",
        '[{"question": "...", "answers": ["...", "...", "...", "..."], "correct": 0}]',
    ),
    "end_script": _json_field(
        "end_script",
        "a closing line asking viewers to comment their score.",
        '"..."',
    ),
}

# Variant -> ordered field prompts. Read-only so a generate() call can't alter the catalog.
FIELD_PROMPTS: Mapping[VideoGenType, Mapping[str, str]] = MappingProxyType({
    VideoGenType.TopicVideo: MappingProxyType(TOPIC_VIDEO_PROMPTS),
    VideoGenType.TextMessageVideo: MappingProxyType(TEXT_MESSAGE_VIDEO_PROMPTS),
    VideoGenType.RatherVideo: MappingProxyType(RATHER_VIDEO_PROMPTS),
    VideoGenType.RankVideo: MappingProxyType(RANK_VIDEO_PROMPTS),
    VideoGenType.QuizVideo: MappingProxyType(QUIZ_VIDEO_PROMPTS),
})


def get_field_prompts(video_type: VideoGenType) -> Mapping[str, str]:
    """Ordered field -> prompt map for a video type."""
    try:
        return FIELD_PROMPTS[VideoGenType(video_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid video type: '{video_type}' (no field prompts registered)") from None
