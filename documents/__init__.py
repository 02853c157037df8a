"""
Document Registry
To manage a new live file:
  1. Create documents/yourdoc.py implementing ActiveDocument
  2. Import it here and add to DOCUMENT_REGISTRY
  Order matters: it is the order the switcher writes files in.
"""

from core.paths import ConfigPaths
from documents.settings_file import SettingsFileDocument
from documents.instructions import InstructionsDocument
from documents.service_registry import ServiceRegistryDocument

DOCUMENT_REGISTRY: dict[str, type] = {
    SettingsFileDocument.id: SettingsFileDocument,
    InstructionsDocument.id: InstructionsDocument,
    ServiceRegistryDocument.id: ServiceRegistryDocument,
}


def get_document(document_id: str, paths: ConfigPaths):
    """Instantiate a document by ID."""
    cls = DOCUMENT_REGISTRY.get(document_id)
    if cls is None:
        raise KeyError(f"Unknown document: {document_id!r}")
    return cls(paths)


def all_documents(paths: ConfigPaths):
    """Instantiated documents in commit order."""
    return [cls(paths) for cls in DOCUMENT_REGISTRY.values()]
