#Command line entry point for story generation

import argparse
import logging
import os
import sys
from typing import List, Optional

from storychain.core.chain_generator import ChainGenerator
from storychain.core.story_runner import StoryRunner
from storychain.data.artifacts import ArtifactManager
from storychain.errors import StoryChainError
from storychain.graph.exporter import export_markdown, save_chain
from storychain.llm.manager import PROVIDER_OPTIONS, ModelManager
from storychain.llm.providers import DEFAULT_MODEL, ModelConfig
from storychain.llm.scene_generator import LLMSceneGenerator, ResponseLog
from storychain.utils.logging import LOG_LEVELS, setup_logging

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value >= 1, got {value}")
    return number

def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a value >= 0, got {value}")
    return number

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storychain", description="Generates a branching narrative using AI")
    parser.add_argument("premise", help="Premise artifact to use (file stem inside the artifacts directory)")
    parser.add_argument("--epochs", type=non_negative_int, default=5, help="Number of epochs to generate")
    parser.add_argument("--branches", type=positive_int, default=1, help="Scenes generated per epoch")
    parser.add_argument("--output", default="story.json", help="Output file path")
    parser.add_argument("--markdown", default=None, help="Also render the first-successor path as markdown")
    parser.add_argument("--html", default=None, help="Also write an interactive graph view")
    parser.add_argument("--provider", choices=PROVIDER_OPTIONS, default=os.environ.get("STORYCHAIN_PROVIDER", "ollama"))
    parser.add_argument("--model", default=os.environ.get("STORYCHAIN_MODEL", DEFAULT_MODEL))
    parser.add_argument("--base-url", default=None, help="Ollama server URL")
    parser.add_argument("--temperature", type=float, default=0.7)
    parser.add_argument("--timeout", type=float, default=None, help="Seconds before a model call is abandoned")
    parser.add_argument("--artifacts-dir", default=os.environ.get("STORYCHAIN_ARTIFACTS", "artifacts"))
    parser.add_argument("--response-log", default="ai_responses.log", help="File receiving every prompt and response ('' disables)")
    parser.add_argument("--workers", type=positive_int, default=1, help="Branches generated in parallel")
    parser.add_argument("--round-retries", type=non_negative_int, default=0, help="Retries of a round whose branches all failed")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO")
    return parser

def create_port(args: argparse.Namespace) -> LLMSceneGenerator:
    manager = ModelManager()
    config = ModelConfig(model_name=args.model, temperature=args.temperature, timeout=args.timeout)
    api_info = os.environ.get("OPENAI_API_KEY") if args.provider == "openai" else args.base_url
    llm = manager.create_chat_model(args.provider, config, api_info)
    response_log = ResponseLog(args.response_log) if args.response_log else None
    return LLMSceneGenerator(llm, model_name=args.model, response_log=response_log)

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    logger.info("Starting StoryChain application")

    artifacts = ArtifactManager(args.artifacts_dir)
    try:
        artifacts.load_from_dir()
        port = create_port(args)
        runner = StoryRunner(port, artifacts, ChainGenerator(port, max_workers=args.workers))
        result = runner.run(args.premise, args.epochs, args.branches, args.round_retries)
    except StoryChainError as e:
        logger.error("Story generation failed: %s", e)
        return 1

    try:
        save_chain(result.chain, args.output)
        logger.info("Story chain exported to %s", args.output)
        if args.markdown:
            export_markdown(result.chain, args.markdown)
        if args.html:
            result.chain.visualize(args.html)
    except (StoryChainError, OSError) as e:
        logger.error("Export failed: %s", e)
        return 1
    return 1 if result.halted else 0


if __name__ == "__main__":
    sys.exit(main())
