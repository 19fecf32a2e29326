#!/usr/bin/env python3
"""
Extracts recipes from URLs and stores them in the recipe database.

Usage:
    python extract_recipes.py https://example.com/recipe https://youtu.be/abc123
    python extract_recipes.py --url-file urls.txt --db data/recipes.db
"""

import argparse
import logging
import pathlib
from typing import Dict, List, Optional

from tqdm.auto import tqdm

from recipe_utils.database import RecipeStore, StorageError
from recipe_utils.extraction import (
    EnvironmentKeyStore,
    ExtractionConfig,
    ExtractionError,
    RecipeExtractionClient,
)

logger = logging.getLogger(__name__)


def load_urls(url_file: Optional[str], urls: List[str]) -> List[str]:
    """Collect URLs from the command line and a file, skipping blanks, comments and repeats."""
    collected = list(urls)
    if url_file:
        with open(url_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    collected.append(line)
    return list(dict.fromkeys(collected))


def extract_all(
    client: RecipeExtractionClient, store: RecipeStore, urls: List[str]
) -> Dict[str, str]:
    """Extract each URL and store the results.

    Returns:
        Mapping of URL to outcome: the stored recipe id, "not found", the
        user-facing error message, or "not saved: ..." when storing failed
    """
    outcomes = {}
    for url in tqdm(urls, desc="Extracting recipes"):
        try:
            extracted = client.extract_recipe(url)
        except ExtractionError as e:
            logger.error(f"Failed to extract {url}: {e} ({e.error_type.value})")
            outcomes[url] = e.user_message
            continue

        if extracted is None:
            outcomes[url] = "not found"
            continue
        try:
            outcomes[url] = store.save_extracted_recipe(extracted)
        except StorageError as e:
            logger.error(f"Failed to store recipe from {url}: {e}")
            outcomes[url] = f"not saved: {e}"
    return outcomes


def main():
    """Main function."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(description="Extract recipes into the database")
    parser.add_argument("urls", nargs="*", help="Recipe or video URLs")
    parser.add_argument("--url-file", type=str, help="File with one URL per line")
    parser.add_argument(
        "--db",
        type=str,
        default="data/recipes.db",
        help="Path to the SQLite database (default: data/recipes.db)",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        help="Extraction API base URL (default: $RECIPE_API_URL)",
    )
    args = parser.parse_args()

    urls = load_urls(args.url_file, args.urls)
    if not urls:
        parser.error("no URLs given")

    config = ExtractionConfig.from_env()
    if args.api_url:
        config.api_base = args.api_url

    pathlib.Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    client = RecipeExtractionClient(config=config, key_store=EnvironmentKeyStore())

    with RecipeStore(args.db) as store:
        outcomes = extract_all(client, store, urls)

    print(f"\nProcessed {len(outcomes)} URLs")
    for url, outcome in outcomes.items():
        print(f"  {url}: {outcome}")


if __name__ == "__main__":
    main()
