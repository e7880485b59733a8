# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Descriptor records produced by the profile parser."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


def strip_fragment(ref: str) -> str:
    """Remove a single leading ``#`` from a local reference."""
    return ref[1:] if ref.startswith("#") else ref


@dataclass(frozen=True)
class DescriptorRef:
    """A nested descriptor, either an ``href`` reference or an inline ``id``."""

    href: Optional[str] = None
    id: Optional[str] = None

    @property
    def target(self) -> Optional[str]:
        """Return the referenced descriptor id without the ``#`` prefix."""
        ref = self.href or self.id
        return strip_fragment(ref) if ref else None

    def points_to(self, descriptor_id: str) -> bool:
        return self.href == f"#{descriptor_id}" or self.id == descriptor_id


@dataclass(frozen=True)
class Descriptor:
    """A top-level ALPS descriptor.

    Every field is optional; which fields are present decides whether the
    descriptor is a state, a transition or an ontology term (see
    :mod:`alps_common.profile.graph`).
    """

    id: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    rt: Optional[str] = None
    tag: Optional[str] = None
    definition: Optional[str] = None
    children: Tuple[DescriptorRef, ...] = ()

    @property
    def label(self) -> str:
        return self.title or self.id or ""


@dataclass(frozen=True)
class Profile:
    title: str
    format: str
    descriptors: List[Descriptor] = field(default_factory=list)

    @property
    def ids(self) -> List[str]:
        return [d.id for d in self.descriptors if d.id]
