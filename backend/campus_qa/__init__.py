"""Campus QA backend: document-grounded answers and student accounts."""

__version__ = "1.0.0"
