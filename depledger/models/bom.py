"""
Bill of materials records.

A :class:`BillOfMaterials` lists everything statically linked into one
subject package, with the licensing of each dependency. It is built once
from a reconciled ledger and allow-list (see
:func:`depledger.core.reports.create_bom`), is immutable, and serializes to
JSON::

    {
      "timestamp": "2024-05-01T12:00:00+00:00",
      "subject": {"identity": "my-app", "url": "...", "version": "1.2.0"},
      "dependencies": [
        {"identity": "helper", "url": "...", "versions": ["0.3.0"],
         "license": "Vendor"},
        {"identity": "serde", "url": "...", "versions": ["1.0.136"],
         "license": {"OpenSource": [{"spdx_short": "MIT",
                                     "copyrights": ["Copyright ..."]}]}}
      ]
    }
"""

from __future__ import annotations

import json
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from depledger.models.allow_list import TargetInfo


@dataclass(frozen=True)
class OpenSourceLicense:
    """One license of an open source dependency."""

    spdx_short: str
    copyrights: Optional[Tuple[str, ...]] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "spdx_short": self.spdx_short,
            "copyrights": list(self.copyrights) if self.copyrights is not None else None,
        }


@dataclass(frozen=True)
class DependencyLicense:
    """Licensing of a dependency: vendor (``open_source is None``) or open source."""

    open_source: Optional[Tuple[OpenSourceLicense, ...]] = None

    @classmethod
    def vendor(cls) -> "DependencyLicense":
        return cls(open_source=None)

    @property
    def is_vendor(self) -> bool:
        return self.open_source is None

    def to_json(self) -> Any:
        if self.open_source is None:
            return "Vendor"
        return {"OpenSource": [lic.to_json() for lic in self.open_source]}


@dataclass(frozen=True)
class BomSubject:
    """The package the bill of materials describes."""

    identity: str
    url: str
    version: str
    target: Optional[TargetInfo] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "identity": self.identity,
            "url": self.url,
            "version": self.version,
        }
        if self.target is not None:
            data["target"] = self.target.to_json()
        return data


@dataclass(frozen=True)
class BomDependency:
    """A dependency linked into the subject."""

    identity: str
    url: str
    versions: Tuple[str, ...]
    license: DependencyLicense

    def to_json(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "url": self.url,
            "versions": list(self.versions),
            "license": self.license.to_json(),
        }


@dataclass(frozen=True)
class BillOfMaterials:
    """Timestamped record of a subject and its linked dependencies."""

    timestamp: datetime
    subject: BomSubject
    dependencies: Tuple[BomDependency, ...] = ()

    def to_json(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "subject": self.subject.to_json(),
            "dependencies": [dep.to_json() for dep in self.dependencies],
        }

    def dumps(self) -> str:
        """Serialize to pretty-printed JSON with a trailing newline."""
        return json.dumps(self.to_json(), indent=2, ensure_ascii=False) + "\n"
