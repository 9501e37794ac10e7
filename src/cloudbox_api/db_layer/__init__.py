"""
CloudBox API Database Layer

Metadata-store services for file records, built on the document adapters in
`metadata_store`.
"""

from .file_service import FileService

__all__ = ['FileService']
