"""
JSON schemas for metadata document validation.
Every document is validated against its collection schema before it is written.
"""

from typing import Dict, Any

import jsonschema


FILE_RECORD_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "_id": {"type": "string", "minLength": 1},
        "key": {"type": "string", "minLength": 1, "maxLength": 1024},
        "size": {"type": "integer", "minimum": 0},
        "contentType": {"type": "string", "minLength": 1},
        "url": {"type": "string"},
        "isFavorite": {"type": "boolean"},
        "isTrash": {"type": "boolean"},
        "createdAt": {"type": "string", "format": "date-time"},
    },
    "required": ["_id", "key", "size", "contentType", "url", "isFavorite", "isTrash", "createdAt"],
    "additionalProperties": False,
}


def validate_file_record_document(document: Dict[str, Any]) -> None:
    """Validate a file record document against the schema"""
    jsonschema.validate(document, FILE_RECORD_JSON_SCHEMA)


FILES_COLLECTION = "files"

# Schema mapping for easy access
DOCUMENT_SCHEMAS = {
    FILES_COLLECTION: FILE_RECORD_JSON_SCHEMA,
}

DOCUMENT_VALIDATORS = {
    FILES_COLLECTION: validate_file_record_document,
}

# Fields stored as native datetimes by backends that support them
DATETIME_FIELDS = {
    FILES_COLLECTION: ("createdAt",),
}

# Secondary indexes per collection: (field, direction, unique)
COLLECTION_INDEXES = {
    FILES_COLLECTION: [
        ("key", 1, True),
        ("createdAt", -1, False),
        ("isTrash", 1, False),
    ],
}
