"""
Pydantic models for capability definitions.

A Capability is one workload or trait template. It is identified by its
name alone; everything else (category, description and the definition
payload) only takes part in the equality check that separates an
updated capability from an unchanged one.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DefinitionError

DESCRIPTION_ANNOTATION = "definition.oam.dev/description"


class CapabilityType(str, Enum):
    """Category of a capability."""

    WORKLOAD = "workload"
    TRAIT = "trait"


DEFINITION_KINDS: Dict[str, CapabilityType] = {
    "WorkloadDefinition": CapabilityType.WORKLOAD,
    "TraitDefinition": CapabilityType.TRAIT,
}


def is_cacheable_name(name: str) -> bool:
    """True when ``name`` can be used as a cache file name."""
    return bool(name) and not name.startswith(".") and "/" not in name and "\\" not in name


class Parameter(BaseModel):
    """A user-settable parameter exposed by a capability template.

    Keys beyond the common ones (alias, ignore, jsonType, ...) are kept as
    extra fields so they are cached and compared like the rest.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    type: str = "string"
    default: Any = None
    required: bool = False
    usage: str = ""
    short: str = ""


class Capability(BaseModel):
    """A named workload or trait definition.

    Instances are immutable; a refresh replaces or removes them, it never
    edits one in place.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: CapabilityType
    description: str = ""

    # Definition payload, compared as a whole and never inspected field by field.
    crd_name: str = ""
    applies_to: List[str] = Field(default_factory=list)
    parameters: List[Parameter] = Field(default_factory=list)
    template: str = ""
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_definition(cls, doc: Any) -> "Capability":
        """Build a capability from a WorkloadDefinition/TraitDefinition manifest.

        Args:
            doc: The parsed manifest mapping.

        Returns:
            The capability described by the manifest.

        Raises:
            DefinitionError: If the manifest is not a usable definition.
        """
        if not isinstance(doc, dict):
            raise DefinitionError(
                f"Expected a mapping, got {type(doc).__name__}"
            )

        kind = doc.get("kind")
        cap_type = DEFINITION_KINDS.get(kind) if isinstance(kind, str) else None
        if cap_type is None:
            raise DefinitionError(f"Unsupported definition kind: {kind!r}")

        metadata = doc.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise DefinitionError(f"{kind} metadata must be a mapping")
        name = metadata.get("name")
        if not name:
            raise DefinitionError(f"{kind} without metadata.name")
        if isinstance(name, str) and not is_cacheable_name(name):
            raise DefinitionError(f"{kind} name {name!r} is not a valid file name")

        annotations = metadata.get("annotations") or {}
        spec = doc.get("spec") or {}
        if not isinstance(annotations, dict) or not isinstance(spec, dict):
            raise DefinitionError(f"{kind} {name!r}: annotations and spec must be mappings")
        spec = dict(spec)

        definition_ref = spec.pop("definitionRef", None) or {}
        if not isinstance(definition_ref, dict):
            raise DefinitionError(f"{kind} {name!r}: definitionRef must be a mapping")
        applies_to = spec.pop("appliesToWorkloads", None) or []
        parameters = spec.pop("parameters", None) or []
        template, schematic_rest = _split_schematic(spec.pop("schematic", None))
        if schematic_rest:
            spec["schematic"] = schematic_rest

        try:
            cap = cls(
                name=name,
                type=cap_type,
                description=annotations.get(DESCRIPTION_ANNOTATION, ""),
                crd_name=definition_ref.get("name", ""),
                applies_to=applies_to,
                parameters=parameters,
                template=template,
                extra=spec,
            )
            # Normalise to the cached form so YAML timestamps and the like
            # compare equal after a round trip through the store.
            return cls.from_record(cap.to_record())
        except ValidationError as exc:
            raise DefinitionError(f"Invalid {kind} {name!r}: {exc}") from exc

    def to_record(self) -> Dict[str, Any]:
        """Return the plain mapping stored in the local cache."""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, data: Any) -> "Capability":
        """Rebuild a capability from a cached record.

        Raises:
            pydantic.ValidationError: If the record does not match the model.
        """
        return cls.model_validate(data)


def equal_capability(a: Capability, b: Capability) -> bool:
    """Return True when two capabilities match on every field."""
    return a.model_dump() == b.model_dump()


def _split_schematic(schematic: Optional[Dict[str, Any]]) -> tuple[str, Dict[str, Any]]:
    """Pull the cue template out of a schematic block.

    Returns:
        (template, whatever else the schematic held).
    """
    if not schematic:
        return "", {}
    if not isinstance(schematic, dict):
        raise DefinitionError("schematic must be a mapping")
    rest = dict(schematic)
    cue = rest.pop("cue", None) or {}
    if not isinstance(cue, dict):
        raise DefinitionError("schematic.cue must be a mapping")
    cue = dict(cue)
    template = cue.pop("template", "") or ""
    if cue:
        rest["cue"] = cue
    return template, rest
