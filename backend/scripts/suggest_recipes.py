#!/usr/bin/env python3
"""
Run the recipe suggestion pipeline once and print the suggestions as JSON.
Usage: cd backend && python scripts/suggest_recipes.py trứng "cà chua" [--web-search]
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Suggest recipes for a list of ingredients")
    parser.add_argument("ingredients", nargs="+", help="Ingredients you have")
    parser.add_argument("--web-search", action="store_true", help="Allow web search when the dataset has no match")
    args = parser.parse_args()

    from core.pipeline.orchestrator import InvalidRequestError, build_pipeline

    pipeline = build_pipeline()
    try:
        suggestions = asyncio.run(pipeline.suggest(args.ingredients, web_search_enabled=args.web_search))
    except InvalidRequestError as e:
        logger.error("Invalid request: %s", e)
        return 2
    print(json.dumps([s.to_dict() for s in suggestions], ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
