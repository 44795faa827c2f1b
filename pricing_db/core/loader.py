"""
Pricing Documents
=================
Reads provider pricing documents from a directory.

Files named ``<provider>_pricing.yaml`` (or ``.yml`` / ``.json``) are read in
filename order. Any unreadable or malformed document raises ``LoadError``.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from pricing_db.core.exceptions import LoadError

logger = structlog.get_logger()

DOCUMENT_SUFFIXES = ("_pricing.yaml", "_pricing.yml", "_pricing.json")


@dataclass(frozen=True)
class PricingDocument:
    """
    A deserialized provider pricing document.

    Attributes:
        name: Document name used in error messages (usually the filename)
        data: Raw mapping with provider, models, grounding, etc.
    """

    name: str
    data: Mapping[str, Any]

    @property
    def provider(self) -> str:
        """Provider name from the document, or inferred from its name."""
        provider = self.data.get("provider")
        if provider:
            return str(provider)
        for suffix in DOCUMENT_SUFFIXES:
            if self.name.endswith(suffix):
                return self.name[: -len(suffix)]
        return Path(self.name).stem


def is_pricing_file(path: Path) -> bool:
    return path.is_file() and path.name.endswith(DOCUMENT_SUFFIXES)


def read_document(path: Path) -> PricingDocument:
    """Read and deserialize a single pricing file."""
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise LoadError(f"read {path.name}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LoadError(f"parse {path.name}: {e}") from e

    if not isinstance(data, Mapping):
        raise LoadError(
            f"parse {path.name}: expected a mapping at top level, got {type(data).__name__}"
        )

    return PricingDocument(name=path.name, data=data)


def load_documents(directory: str | Path) -> list[PricingDocument]:
    """
    Read all pricing documents in a directory.

    Raises:
        LoadError: The directory is missing or a document cannot be parsed
    """
    config_dir = Path(directory)
    if not config_dir.is_dir():
        raise LoadError(f"read config dir {config_dir}: not a directory")

    documents = []
    for path in sorted(config_dir.iterdir(), key=lambda p: p.name):
        if not is_pricing_file(path):
            continue
        documents.append(read_document(path))
        logger.debug("Read pricing document", document=path.name)

    return documents
