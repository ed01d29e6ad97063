"""
Generate a structured video script from a free-form prompt by talking to an AI backend.

Two phases per call: first the model picks the video type, then it is asked for each of
that type's fields, one turn per field. The result is a JSON document the video builder
consumes.

Usage:
  python build_script.py "Why do cats purr?"
  python build_script.py "Top 5 fastest animals" --ai-type OpenAIGen --model gpt-4o
  python build_script.py --list-models --ai-type OllamaAIGen
"""
import argparse
import sys
from pathlib import Path
from typing import Callable

import llm_utils
import prompt_builders
from build_scripts_utils import VideoDocument, elicit_fields, load_video_document
from config import AIOptions, Config, config
from conversation import ConversationHistory
from script_types import classify_video_type
from utils import LogSink, as_log_sink, safe_filename

SCRIPTS_DIR = Path("scripts")


def generate_document(
    log: "LogSink | Callable[[str], None] | None",
    system_prompt: str,
    user_prompt: str,
    ai_type: "llm_utils.AIGenType | str",
    api_key: str | None = None,
    options: AIOptions | None = None,
    settings: Config | None = None,
) -> VideoDocument:
    """
    Run the full classification + elicitation conversation and return the VideoDocument.

    Raises:
        llm_utils.ConfigError: unknown backend or missing credential (before any network I/O).
        llm_utils.ProviderError: any network / API failure; nothing partial is returned.
    """
    settings = settings or config
    sink = as_log_sink(log, verbose=settings.debug)
    adapter = llm_utils.create_adapter(ai_type, sink, api_key=api_key, options=options, settings=settings)
    label = llm_utils.get_text_model_display(adapter)

    sink.log(f"Using {adapter.backend.display_name} model: {adapter.model}")
    if adapter.endpoint:
        sink.log(f"Calling {adapter.backend.display_name} API with endpoint: {adapter.endpoint}")

    history = ConversationHistory(system_prompt)

    # Phase 1: video type
    classification_prompt = prompt_builders.build_classification_prompt(
        user_prompt, json_object=adapter.structured_classification
    )
    try:
        answer = adapter.run_turn(
            history, classification_prompt, classification=True, key=llm_utils.CLASSIFICATION_KEY
        )
    except llm_utils.ProviderError as e:
        sink.log(str(e))
        raise
    video_type = classify_video_type(adapter.unwrap_classification(answer), sink, label)

    # Phase 2: fields, in catalog order
    document = VideoDocument(type=video_type)
    field_prompts = prompt_builders.get_field_prompts(video_type)
    try:
        elicit_fields(adapter, history, document, field_prompts, sink, label)
    except llm_utils.ProviderError as e:
        sink.log(str(e))
        raise
    return document


def generate(
    log: "LogSink | Callable[[str], None] | None",
    system_prompt: str,
    user_prompt: str,
    ai_type: "llm_utils.AIGenType | str",
    api_key: str | None = None,
    options: AIOptions | None = None,
    settings: Config | None = None,
) -> str:
    """Same as generate_document(), serialized as two-space indented JSON."""
    return generate_document(log, system_prompt, user_prompt, ai_type, api_key, options, settings).to_json()


def list_models(
    ai_type: "llm_utils.AIGenType | str",
    api_key: str | None = None,
    options: AIOptions | None = None,
    settings: Config | None = None,
) -> list[str]:
    """Model names for a backend. Live query where the backend supports it, else a known list."""
    settings = settings or config
    adapter = llm_utils.create_adapter(
        ai_type, as_log_sink(None, verbose=settings.debug), api_key=api_key, options=options, settings=settings
    )
    return adapter.list_models()


def parse_args(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Generate short-form video scripts with AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Local Ollama (default backend)
  python build_script.py "Why do cats purr?"

  # OpenAI with a specific model, custom output file
  python build_script.py "Top 5 fastest animals" ranks.json --ai-type OpenAIGen --model gpt-4o

  # Any OpenAI-compatible server
  python build_script.py "Space trivia quiz" --ai-type openai --endpoint http://localhost:8000/v1/

  # What models can I use?
  python build_script.py --list-models --ai-type AnthropicAIGen
        """
    )

    parser.add_argument("prompt", nargs="?", help="What the video should be about (a comment, idea, topic)")
    parser.add_argument("output", nargs="?", help="Output JSON file (default: scripts/<prompt>_script.json)")

    parser.add_argument("--ai-type", default=config.ai_type,
                        help=f"AI backend: {', '.join(t.value for t in llm_utils.AIGenType)} (default: {config.ai_type})")
    parser.add_argument("--model", help="Model name (default: backend default)")
    parser.add_argument("--endpoint", help="API endpoint / host (OpenAI, Anthropic, Ollama)")
    parser.add_argument("--api-key", help="API key (default: backend environment variable)")
    parser.add_argument("--system-prompt", help="Override the system prompt")
    parser.add_argument("--list-models", action="store_true", help="List models for --ai-type and exit")
    parser.add_argument("--json-file", help="Check an existing script JSON (skips AI) and print its fields")
    parser.add_argument("--verbose", action="store_true", help="Log every streamed chunk")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        config.debug = True
    options = AIOptions(model=args.model, endpoint=args.endpoint)

    try:
        if args.list_models:
            for name in list_models(args.ai_type, api_key=args.api_key, options=options):
                print(name)
            return 0

        if args.json_file:
            document = load_video_document(args.json_file)
            print(f"[SCRIPT] {args.json_file}: {document.type.value} with fields {', '.join(document.fields)}")
            return 0

        if not args.prompt:
            print("ERROR: A prompt is required (or use --list-models).")
            return 1

        if args.output:
            output_file = Path(args.output)
            if not output_file.is_absolute() and output_file.parent == Path("."):
                output_file = SCRIPTS_DIR / output_file
        else:
            output_file = SCRIPTS_DIR / safe_filename(args.prompt)

        script_json = generate(
            None,
            args.system_prompt or prompt_builders.DEFAULT_SYSTEM_PROMPT,
            args.prompt,
            args.ai_type,
            api_key=args.api_key,
            options=options,
        )
    except (llm_utils.GenerationError, FileNotFoundError, ValueError) as e:
        print(f"\n[ERROR] {e}")
        return 1

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(script_json)
    print(f"\n[SCRIPT] Saved: {output_file}")
    return 0


# ------------- ENTRY POINT -------------

if __name__ == "__main__":
    sys.exit(main())
