#!/usr/bin/env python3
"""
Utility script to smoke-test a vector store end-to-end and record basic timings.
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import List

from vectorkit import Document, VectorStoreFactory, load_settings
from vectorkit.embeddings import OpenAIEmbeddingModel


def _read_documents(paths: List[str]) -> List[Document]:
    """Each file holds either a JSON list of strings or plain text."""
    documents: List[Document] = []
    for raw_path in paths:
        path = Path(raw_path)
        text = path.read_text(encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            payload = [text]
        if not isinstance(payload, list):
            payload = [payload]
        for position, item in enumerate(payload):
            documents.append(
                Document.create(str(item), metadata={"source": path.name, "position": position})
            )
    return documents


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a vector store smoke test.")
    parser.add_argument(
        "--config",
        default="config/vectorkit.example.yaml",
        help="Path to the vectorkit YAML config.",
    )
    parser.add_argument(
        "--docs-file",
        action="append",
        default=[],
        help="Path to a file containing either a JSON list of docs or plain text.",
    )
    parser.add_argument("--query", required=True, help="Query used for retrieval.")
    parser.add_argument("--top-k", type=int, default=4, help="Number of hits to request.")
    parser.add_argument("--threshold", type=float, default=0.0, help="Minimum relevance.")
    parser.add_argument(
        "--iterations",
        type=int,
        default=1,
        help="Number of search iterations to run for averaging.",
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Delete the indexed documents afterwards.",
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    documents = _read_documents(args.docs_file)
    if not documents:
        raise SystemExit("Provide at least one document via --docs-file.")

    settings = load_settings(args.config)
    with OpenAIEmbeddingModel(settings.embeddings) as embedding_model:
        store = VectorStoreFactory(settings.vector_store).create(embedding_model)
        try:
            index_start = time.perf_counter()
            ids = store.add(documents)
            index_duration = time.perf_counter() - index_start
            print(f"Indexed {len(ids)} documents in {index_duration:.2f}s")

            search_times = []
            results = []
            for _ in range(args.iterations):
                start = time.perf_counter()
                results = store.similarity_search(args.query, args.top_k, args.threshold)
                search_times.append(time.perf_counter() - start)
            for document in results:
                print(f"{document.metadata['distance']:.4f}  {document.id}  {document.text[:80]!r}")

            avg_search = sum(search_times) / max(len(search_times), 1)
            print(f"Ran {args.iterations} search iteration(s); avg time {avg_search:.3f}s")

            if args.cleanup:
                print("Cleanup succeeded:", store.delete(ids))
        finally:
            store.close()


if __name__ == "__main__":
    main()
