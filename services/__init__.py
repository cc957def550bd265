"""Service layer for RagSearch - orchestration of chunking, embedding and storage."""

from .base_service import BaseService
from .ingestion_service import IngestionResult, IngestionService
from .search_service import SearchService

__all__ = [
    'BaseService',
    'IngestionResult',
    'IngestionService',
    'SearchService',
]
