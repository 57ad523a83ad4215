"""
RAG (Retrieval-Augmented Generation) Pipeline

Answers student questions from the university's own documents by:
1. Ingesting documents into a Chroma Cloud collection
2. Retrieving the chunks nearest to the question at query time
3. Injecting those chunks into a prompt that restricts the model to them
"""

from campus_qa.services.rag.pipeline import RAGPipeline, create_rag_pipeline
from campus_qa.services.rag.prompt import NO_INFORMATION_ANSWER, build_context
from campus_qa.services.rag.retriever import RetrievedDocument, VectorRetriever

__all__ = [
    "RAGPipeline",
    "create_rag_pipeline",
    "NO_INFORMATION_ANSWER",
    "build_context",
    "RetrievedDocument",
    "VectorRetriever",
]
