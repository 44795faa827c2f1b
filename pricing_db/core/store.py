"""
Pricing Store
=============
Immutable in-memory pricing tables built from validated provider documents.

The store is built exactly once: tables are validated and assembled first,
then published under the write side of the lock. Afterwards every access
takes the shared read side only, so any number of threads can calculate
concurrently.

Identifiers are stored twice: unqualified (``gpt-4o``) and provider-qualified
(``openai/gpt-4o``). When two documents define the same unqualified
identifier, the document loaded last (by filename order) wins; the qualified
key always resolves deterministically.
"""

import threading
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, TypeVar

import structlog
from pydantic import ValidationError

from pricing_db.core.exceptions import LoadError
from pricing_db.core.loader import PricingDocument, load_documents
from pricing_db.core.matching import find_by_prefix, sorted_keys_by_length_desc
from pricing_db.core.validator import (
    validate_billing_type,
    validate_credit_pricing,
    validate_grounding_pricing,
    validate_image_pricing,
    validate_model_pricing,
)
from pricing_db.schemas.pricing import (
    CreditPricing,
    GroundingPricing,
    ImageModelPricing,
    ModelPricing,
    ProviderPricing,
)

logger = structlog.get_logger()

T = TypeVar("T")


class ReadWriteLock:
    """
    Readers/writer lock.

    Any number of readers may hold the lock at once; a writer holds it
    exclusively. Waiting writers block new readers.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _merge(
    table: dict[str, T],
    owners: dict[str, str],
    key: str,
    value: T,
    provider: str,
    kind: str,
) -> None:
    previous = owners.get(key)
    if previous is not None and previous != provider:
        logger.warning(
            "Duplicate identifier, later document wins",
            kind=kind,
            identifier=key,
            previous_provider=previous,
            provider=provider,
        )
    table[key] = value
    owners[key] = provider


class PricingStore:
    """
    Validated, read-only pricing tables.

    Use ``PricingStore.from_directory`` or ``PricingStore.from_documents``;
    the constructor creates an empty store.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._models: dict[str, ModelPricing] = {}
        self._model_keys: tuple[str, ...] = ()
        self._image_models: dict[str, ImageModelPricing] = {}
        self._image_model_keys: tuple[str, ...] = ()
        self._grounding: dict[str, GroundingPricing] = {}
        self._grounding_keys: tuple[str, ...] = ()
        self._credits: dict[str, CreditPricing] = {}
        self._providers: dict[str, ProviderPricing] = {}

    @classmethod
    def from_directory(cls, directory: str | Path) -> "PricingStore":
        """Load and validate every pricing document in ``directory``."""
        documents = load_documents(directory)
        if not documents:
            raise LoadError(f"no pricing files found in {directory}")
        return cls.from_documents(documents)

    @classmethod
    def from_documents(cls, documents: Iterable[PricingDocument]) -> "PricingStore":
        """
        Build a store from deserialized documents.

        Raises:
            LoadError: No documents, a malformed document, or an invalid value.
                Nothing is loaded when any document fails.
        """
        store = cls()
        store._load(list(documents))
        logger.info(
            "Pricing store built",
            providers=len(store._providers),
            models=len(store._models),
            image_models=len(store._image_models),
            grounding_prefixes=len(store._grounding),
        )
        return store

    @classmethod
    def from_mappings(cls, documents: Mapping[str, Mapping]) -> "PricingStore":
        """Build a store from ``{document name: document data}``."""
        return cls.from_documents(
            PricingDocument(name=name, data=data) for name, data in sorted(documents.items())
        )

    def _load(self, documents: Sequence[PricingDocument]) -> None:
        if not documents:
            raise LoadError("no pricing files found")

        models: dict[str, ModelPricing] = {}
        image_models: dict[str, ImageModelPricing] = {}
        grounding: dict[str, GroundingPricing] = {}
        credits: dict[str, CreditPricing] = {}
        providers: dict[str, ProviderPricing] = {}
        owners: dict[str, dict[str, str]] = {"model": {}, "image model": {}, "grounding": {}}

        for document in documents:
            if not isinstance(document.data, Mapping):
                raise LoadError(
                    f"parse {document.name}: expected a mapping at top level, "
                    f"got {type(document.data).__name__}"
                )
            provider = document.provider
            try:
                pricing = ProviderPricing.model_validate({**document.data, "provider": provider})
            except ValidationError as e:
                raise LoadError(f"parse {document.name}: {e}") from e

            validate_billing_type(provider, pricing.billing_type, document.name)

            for model, model_pricing in pricing.models.items():
                validate_model_pricing(model, model_pricing, document.name)
                _merge(models, owners["model"], model, model_pricing, provider, "model")
                models[f"{provider}/{model}"] = model_pricing

            for prefix, grounding_pricing in pricing.grounding.items():
                validate_grounding_pricing(prefix, grounding_pricing, document.name)
                _merge(grounding, owners["grounding"], prefix, grounding_pricing, provider, "grounding")
                grounding[f"{provider}/{prefix}"] = grounding_pricing

            for model, image_pricing in pricing.image_models.items():
                validate_image_pricing(model, image_pricing, document.name)
                _merge(
                    image_models, owners["image model"], model, image_pricing, provider, "image model"
                )
                image_models[f"{provider}/{model}"] = image_pricing

            if pricing.credit_pricing is not None:
                validate_credit_pricing(provider, pricing.credit_pricing, document.name)
                credits[provider] = pricing.credit_pricing

            if provider in providers:
                logger.warning("Duplicate provider, later document wins", provider=provider)
            providers[provider] = pricing
            logger.debug("Loaded pricing document", document=document.name, provider=provider)

        model_keys = tuple(sorted_keys_by_length_desc(models))
        image_model_keys = tuple(sorted_keys_by_length_desc(image_models))
        grounding_keys = tuple(sorted_keys_by_length_desc(grounding))

        with self._lock.write():
            self._models = models
            self._model_keys = model_keys
            self._image_models = image_models
            self._image_model_keys = image_model_keys
            self._grounding = grounding
            self._grounding_keys = grounding_keys
            self._credits = credits
            self._providers = providers

    @contextmanager
    def reading(self) -> Iterator[None]:
        """Hold the shared read lock for a multi-step calculation."""
        with self._lock.read():
            yield

    # Lookups below return shared instances and expect the caller to hold
    # ``reading()``; the engine is their only user.

    def _lookup_model(self, model: str) -> Optional[ModelPricing]:
        pricing = self._models.get(model)
        if pricing is not None:
            return pricing
        key = find_by_prefix(model, self._model_keys)
        return self._models[key] if key is not None else None

    def _lookup_image_model(self, model: str) -> Optional[ImageModelPricing]:
        pricing = self._image_models.get(model)
        if pricing is not None:
            return pricing
        key = find_by_prefix(model, self._image_model_keys)
        return self._image_models[key] if key is not None else None

    def _lookup_grounding(self, model: str) -> Optional[GroundingPricing]:
        key = find_by_prefix(model, self._grounding_keys)
        return self._grounding[key] if key is not None else None

    def _lookup_credits(self, provider: str) -> Optional[CreditPricing]:
        return self._credits.get(provider)

    # Public accessors; every returned entity is an independent deep copy.

    def get_pricing(self, model: str) -> Optional[ModelPricing]:
        with self._lock.read():
            pricing = self._lookup_model(model)
        return pricing.model_copy(deep=True) if pricing is not None else None

    def get_image_pricing(self, model: str) -> Optional[ImageModelPricing]:
        with self._lock.read():
            pricing = self._lookup_image_model(model)
        return pricing.model_copy(deep=True) if pricing is not None else None

    def get_grounding_pricing(self, model: str) -> Optional[GroundingPricing]:
        with self._lock.read():
            pricing = self._lookup_grounding(model)
        return pricing.model_copy(deep=True) if pricing is not None else None

    def get_credit_pricing(self, provider: str) -> Optional[CreditPricing]:
        with self._lock.read():
            pricing = self._lookup_credits(provider)
        return pricing.model_copy(deep=True) if pricing is not None else None

    def get_provider_metadata(self, provider: str) -> Optional[ProviderPricing]:
        with self._lock.read():
            pricing = self._providers.get(provider)
        return pricing.model_copy(deep=True) if pricing is not None else None

    def list_providers(self) -> list[str]:
        """Loaded provider names in alphabetical order."""
        with self._lock.read():
            return sorted(self._providers)

    def model_count(self) -> int:
        """Number of model keys, unqualified and provider-qualified."""
        with self._lock.read():
            return len(self._models)

    def image_model_count(self) -> int:
        with self._lock.read():
            return len(self._image_models)

    def provider_count(self) -> int:
        with self._lock.read():
            return len(self._providers)
