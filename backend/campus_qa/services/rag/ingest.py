"""
Document Ingestion Script

Loads university documents (PDF, DOCX, TXT, MD) from the documents/ directory,
splits them into chunks, embeds them using OpenAI, and upserts them into the
Chroma Cloud collection that /ask retrieves from.

How it works:
1. LOAD   – LangChain document loaders read raw files into Document objects
2. TAG    – Each document records the file it came from (source_file)
3. SPLIT  – RecursiveCharacterTextSplitter breaks docs into ~1000-char chunks
4. EMBED  – OpenAI embeddings convert each chunk to a vector
5. STORE  – collection.upsert() writes ids + vectors + text + metadata;
           ids are "<source_file>-<n>" so re-ingesting a file replaces its chunks

Usage:
    cd backend
    python -m campus_qa.services.rag.ingest [DOCS_DIR]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from langchain_community.document_loaders import (
    Docx2txtLoader,
    PyMuPDFLoader,
    TextLoader,
)
from langchain_text_splitters import RecursiveCharacterTextSplitter

from campus_qa.core.config import Settings, get_settings
from campus_qa.core.logging_config import configure_logging
from campus_qa.services.rag.retriever import create_embeddings, open_collection

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


class IngestionError(Exception):
    pass


def _loader_for(file_path: Path):
    suffix = file_path.suffix.lower()
    if suffix == ".pdf":
        return PyMuPDFLoader(str(file_path))
    elif suffix == ".docx":
        return Docx2txtLoader(str(file_path))
    elif suffix in (".txt", ".md"):
        return TextLoader(str(file_path), encoding="utf-8")
    return None


# ── Document Loading ─────────────────────────────────────────────────────────

def load_documents(docs_dir: str) -> list:
    """
    Walk the documents directory and load every supported file.

    Each loader returns a list of Document objects with .page_content (text)
    and .metadata (source path, page number, etc).
    """
    documents = []
    docs_path = Path(docs_dir)

    if not docs_path.exists():
        logger.warning("Documents directory not found: %s", docs_dir)
        return documents

    for file_path in sorted(docs_path.rglob("*")):
        loader = _loader_for(file_path)
        if loader is None:
            continue

        logger.info("Loading %s", file_path.name)
        try:
            docs = loader.load()
        except Exception as e:
            logger.error("Failed to load %s: %s", file_path.name, e)
            continue

        for doc in docs:
            doc.metadata["source_file"] = file_path.name
        documents.extend(docs)

    return documents


# ── Chunking ─────────────────────────────────────────────────────────────────

def split_documents(documents: list, chunk_size: int = 1000, chunk_overlap: int = 200) -> list:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=["\n\n", "\n", ". ", " ", ""],
        length_function=len,
    )
    return splitter.split_documents(documents)


def chunk_ids(chunks: list) -> list[str]:
    """Deterministic ids: "<source_file>-<index within that file>"."""
    counters: dict[str, int] = {}
    ids = []
    for chunk in chunks:
        source = chunk.metadata.get("source_file", "unknown")
        index = counters.get(source, 0)
        counters[source] = index + 1
        ids.append(f"{source}-{index}")
    return ids


def _clean_metadata(metadata: dict) -> dict:
    """Chroma only accepts scalar metadata values."""
    return {
        key: value
        for key, value in metadata.items()
        if isinstance(value, (str, int, float, bool))
    }


# ── Embedding & Storage ──────────────────────────────────────────────────────

def store_chunks(chunks: list, collection: Any, embeddings: Any) -> int:
    ids = chunk_ids(chunks)
    for start in range(0, len(chunks), UPSERT_BATCH_SIZE):
        batch = chunks[start:start + UPSERT_BATCH_SIZE]
        texts = [chunk.page_content for chunk in batch]
        collection.upsert(
            ids=ids[start:start + UPSERT_BATCH_SIZE],
            embeddings=embeddings.embed_documents(texts),
            documents=texts,
            metadatas=[_clean_metadata(chunk.metadata) for chunk in batch],
        )
        logger.info("Stored chunks %d-%d", start, start + len(batch) - 1)
    return len(chunks)


# ── Main ─────────────────────────────────────────────────────────────────────

def run_ingestion(
    docs_dir: str | None = None,
    settings: Settings | None = None,
    collection: Any = None,
    embeddings: Any = None,
) -> int:
    """
    Run the full ingestion pipeline.

    Returns:
        Number of chunks stored

    Raises:
        IngestionError: missing credentials or no documents to ingest
    """
    settings = settings or get_settings()
    docs_dir = docs_dir or settings.docs_dir

    if not settings.rag_configured:
        raise IngestionError("OPENAI_API_KEY and CHROMA_API_KEY must both be set.")

    logger.info("Loading documents from %s", Path(docs_dir).resolve())
    documents = load_documents(docs_dir)
    if not documents:
        raise IngestionError(f"No documents found in {docs_dir}")

    chunks = split_documents(documents, settings.chunk_size, settings.chunk_overlap)
    logger.info("Split %d pages into %d chunks", len(documents), len(chunks))

    collection = collection if collection is not None else open_collection(settings)
    embeddings = embeddings if embeddings is not None else create_embeddings(settings)
    count = store_chunks(chunks, collection, embeddings)

    logger.info("Ingestion complete! %d chunks stored in %s", count, settings.chroma_collection)
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest documents into the vector index")
    parser.add_argument("docs_dir", nargs="?", default=None, help="Directory of documents")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        run_ingestion(args.docs_dir, settings)
    except IngestionError as e:
        logger.error("Ingestion aborted: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
