#Converts an exported story chain into a markdown story

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from storychain.errors import PersistenceError
from storychain.graph.exporter import export_markdown, load_chain
from storychain.utils.logging import LOG_LEVELS, setup_logging

logger = logging.getLogger(__name__)


def markdown_path_for(json_path: str) -> str:
    path = Path(json_path)
    if path.suffix == ".json":
        return str(path.with_suffix(".md"))
    return str(path) + ".md"

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="storychain-convert", description="Render a story chain JSON file as markdown")
    parser.add_argument("story", help="story.json produced by storychain")
    parser.add_argument("--output", default=None, help="Markdown path (defaults to the input with .md)")
    parser.add_argument("--title", default="Generated Story")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING")
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    output = args.output or markdown_path_for(args.story)
    try:
        chain = load_chain(args.story)
        export_markdown(chain, output, title=args.title)
    except PersistenceError as e:
        logger.error("%s", e)
        return 1
    print(f"Successfully converted {args.story} to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
