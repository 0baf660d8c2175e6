"""
Unified data model exports for depledger.

This module re-exports the core data models to provide a stable and
convenient public API. Users can import models directly from
``depledger.models`` instead of individual submodules.

Example:
    >>> from depledger.models import PackageLedger, AllowList, VersionSet
"""

from __future__ import annotations

from depledger.models.version_set import VersionSet, parse_version
from depledger.models.ledger import PackageLedger, PackageUsage
from depledger.models.licenses import Copyright, License, LicenseKind
from depledger.models.allow_list import (
    AllowList,
    Source,
    TargetInfo,
    ThirdPartyPackage,
    VendorPackage,
    load_allow_list,
    loads_allow_list,
)
from depledger.models.bom import (
    BillOfMaterials,
    BomDependency,
    BomSubject,
    DependencyLicense,
    OpenSourceLicense,
)

__all__ = [
    "VersionSet",
    "parse_version",
    "PackageLedger",
    "PackageUsage",
    "Copyright",
    "License",
    "LicenseKind",
    "AllowList",
    "Source",
    "TargetInfo",
    "ThirdPartyPackage",
    "VendorPackage",
    "load_allow_list",
    "loads_allow_list",
    "BillOfMaterials",
    "BomDependency",
    "BomSubject",
    "DependencyLicense",
    "OpenSourceLicense",
]
