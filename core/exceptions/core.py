"""RagSearch Core Exceptions - Core exception classes for error handling.

This module contains the exception hierarchy for the RagSearch system. These
exceptions provide clear error categorization and enable proper error handling
throughout the application.
"""

from typing import Optional, Any, Dict


class RagSearchError(Exception):
    """Base exception for all RagSearch-specific errors.
    
    This is the root exception class that all other RagSearch exceptions
    inherit from. It carries a context dictionary and an optional cause.
    """
    
    def __init__(
        self, 
        message: str, 
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize RagSearch error.
        
        Args:
            message: Human-readable error description
            context: Optional dictionary with error context (e.g., chunk index, tenant)
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause
    
    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ValidationError(RagSearchError):
    """Raised when input data fails validation.
    
    Used for missing identifiers, blank content, out-of-range search limits,
    embedding dimension mismatches and invalid chunking parameters.
    """
    
    def __init__(
        self, 
        field: str, 
        value: Any, 
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize validation error.
        
        Args:
            field: Name of the field that failed validation
            value: The invalid value
            reason: Description of why validation failed
            context: Optional additional context
        """
        message = f"Validation failed for field '{field}': {reason}"
        super().__init__(message, context)
        self.field = field
        self.value = value
        self.reason = reason


class ModelError(RagSearchError):
    """Raised when a domain model cannot be built or converted."""
    
    def __init__(
        self, 
        model_type: str, 
        operation: str, 
        reason: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize model error.
        
        Args:
            model_type: Type of model that caused the error (e.g., "Document", "Chunk")
            operation: Operation that failed (e.g., "from_dict", "to_dict")
            reason: Description of what went wrong
            context: Optional additional context
        """
        message = f"{model_type} {operation} failed: {reason}"
        super().__init__(message, context)
        self.model_type = model_type
        self.operation = operation
        self.reason = reason


class EmbeddingError(RagSearchError):
    """Raised when embedding generation returns unusable results."""
    
    def __init__(
        self, 
        provider: Optional[str] = None,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize embedding error.
        
        Args:
            provider: Embedding provider name (e.g., "openai")
            model: Model name (e.g., "nomic-embed-text")
            operation: Operation that failed (e.g., "embed", "attach")
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if provider:
            parts.append(f"provider={provider}")
        if model:
            parts.append(f"model={model}")
        if operation:
            parts.append(f"operation={operation}")
        
        prefix = f"Embedding error ({', '.join(parts)})" if parts else "Embedding error"
        message = f"{prefix}: {reason}" if reason else prefix
        
        super().__init__(message, context)
        self.provider = provider
        self.model = model
        self.operation = operation
        self.reason = reason


class DatabaseError(RagSearchError):
    """Raised when the vector store is used in an invalid state.
    
    Driver errors from duckdb itself are not wrapped; they reach the caller
    unchanged after being logged.
    """
    
    def __init__(
        self, 
        operation: Optional[str] = None,
        table: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize database error.
        
        Args:
            operation: Database operation that failed (e.g., "store", "search")
            table: Database table involved in the operation
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if operation:
            parts.append(f"operation={operation}")
        if table:
            parts.append(f"table={table}")
        
        prefix = f"Database error ({', '.join(parts)})" if parts else "Database error"
        message = f"{prefix}: {reason}" if reason else prefix
        
        super().__init__(message, context)
        self.operation = operation
        self.table = table
        self.reason = reason


class ConfigurationError(RagSearchError):
    """Raised when configuration is invalid or inconsistent with stored data."""
    
    def __init__(
        self, 
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize configuration error.
        
        Args:
            config_key: Configuration key that caused the error
            config_value: Invalid configuration value
            reason: Description of what went wrong
            context: Optional additional context
        """
        if config_key:
            message = f"Configuration error for '{config_key}': {reason}"
        else:
            message = f"Configuration error: {reason}" if reason else "Configuration error"
        
        super().__init__(message, context)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason


class ProviderError(RagSearchError):
    """Raised when an external provider is missing or misconfigured."""
    
    def __init__(
        self, 
        provider: Optional[str] = None,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """Initialize provider error.
        
        Args:
            provider: Provider name (e.g., "openai", "duckdb")
            service: Service or endpoint that failed
            status_code: HTTP status code if applicable
            reason: Description of what went wrong
            context: Optional additional context
        """
        parts = []
        if provider:
            parts.append(f"provider={provider}")
        if service:
            parts.append(f"service={service}")
        if status_code:
            parts.append(f"status={status_code}")
        
        prefix = f"Provider error ({', '.join(parts)})" if parts else "Provider error"
        message = f"{prefix}: {reason}" if reason else prefix
        
        super().__init__(message, context)
        self.provider = provider
        self.service = service
        self.status_code = status_code
        self.reason = reason
