"""
W3C DID data structures for the ``did:nostr`` method.

Field names are snake_case in Python and serialise to the W3C camelCase
names (``@context``, ``alsoKnownAs``, ``verificationMethod``, ...) through
pydantic aliases. ``to_dict()`` omits fields that are ``None`` so an absent
service or alias list never appears as ``null``.

See Also:
    [DID Core](https://www.w3.org/TR/did-core/): Document and resolution
        result structure.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


DID_METHOD = "nostr"
DID_PREFIX = f"did:{DID_METHOD}:"
DID_CONTEXT = (
    "https://www.w3.org/ns/did/v1",
    "https://w3id.org/security/suites/secp256k1-2019/v1",
)
DID_CONTENT_TYPE = "application/did+ld+json"


class _DidModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data)


class VerificationMethod(_DidModel):
    id: str
    type: str
    controller: str
    public_key_hex: str | None = Field(default=None, alias="publicKeyHex")


class DidService(_DidModel):
    id: str
    type: str
    service_endpoint: str | list[str] = Field(alias="serviceEndpoint")


class DidDocument(_DidModel):
    """A DID document. Build with [generate_document()][nostrid.did.document.generate_document]."""

    context: list[str] = Field(default_factory=lambda: list(DID_CONTEXT), alias="@context")
    id: str
    also_known_as: list[str] | None = Field(default=None, alias="alsoKnownAs")
    verification_method: list[VerificationMethod] = Field(alias="verificationMethod")
    authentication: list[str]
    assertion_method: list[str] | None = Field(default=None, alias="assertionMethod")
    service: list[DidService] | None = None


class DidDocumentMetadata(_DidModel):
    created: str | None = None
    updated: str | None = None
    deactivated: bool | None = None


class DidResolutionMetadata(_DidModel):
    """Resolution status: ``content_type`` on success, ``error`` otherwise.

    ``error`` is one of ``invalidDid``, ``notFound`` or ``internalError``.
    """

    content_type: str | None = Field(default=None, alias="contentType")
    error: str | None = None
    error_message: str | None = Field(default=None, alias="errorMessage")


class DidResolutionResult(_DidModel):
    did_document: DidDocument | None = Field(default=None, alias="didDocument")
    did_document_metadata: DidDocumentMetadata = Field(
        default_factory=DidDocumentMetadata, alias="didDocumentMetadata"
    )
    did_resolution_metadata: DidResolutionMetadata = Field(
        default_factory=DidResolutionMetadata, alias="didResolutionMetadata"
    )

    @property
    def ok(self) -> bool:
        return self.did_document is not None and self.did_resolution_metadata.error is None

    def to_dict(self) -> dict[str, Any]:
        # didDocument stays in the output as null on failure.
        data = super().to_dict()
        data.setdefault("didDocument", None)
        return data

    @classmethod
    def failure(cls, error: str, message: str) -> Self:
        return cls(
            did_resolution_metadata=DidResolutionMetadata(error=error, error_message=message),
        )
