"""Report generation from a reconciled ledger.

Two reports are produced:

- :func:`render_license_report` builds the plain text notice shipped with
  a distribution: a license summary, one block per open source package
  and the full text of every license involved.
- :func:`create_bom` builds a :class:`~depledger.models.BillOfMaterials`
  for one vendor package, listing everything linked into it.

Both validate their whole input before producing anything, so a failure
never yields a partial report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from depledger.core.reconciler import check_allowed, prune
from depledger.models.licenses import summarize
from depledger.exceptions import (
    NoLicenseSpecifiedError,
    SubjectNotFoundError,
    UnknownDependencyError,
)
from depledger.constants import REPORT_COPIES_NOTICE, REPORT_HEADER
from depledger.models import (
    AllowList,
    BillOfMaterials,
    BomDependency,
    BomSubject,
    DependencyLicense,
    OpenSourceLicense,
    PackageLedger,
    PackageUsage,
    ThirdPartyPackage,
)
from depledger.utils import get_logger

logger = get_logger("core.reports")


# ---------------------------------------------------------------------------
# License report
# ---------------------------------------------------------------------------


def render_license_report(ledger: PackageLedger, allow_list: AllowList) -> str:
    """Render the license report for every distributed open source package.

    Build-only and vendor packages are left out. ``ledger`` itself is not
    modified.

    Raises:
        AllowListViolationError: Packages missing from the third-party list.
        NoLicenseSpecifiedError: A third-party entry lists no license.
    """
    distributed = ledger.copy()
    prune(distributed, allow_list, vendor=True)
    check_allowed(distributed, allow_list)

    entries: List[Tuple[PackageUsage, ThirdPartyPackage]] = []
    for identity, usage in distributed.items():
        package = allow_list.third_party[identity]
        if not package.licenses:
            raise NoLicenseSpecifiedError(identity)
        entries.append((usage, package))

    kinds = summarize(
        [lic for _, package in entries for lic in package.licenses]
    )

    lines = [REPORT_HEADER, ""]
    for spdx, kind in kinds.items():
        lines.append(f"  * {spdx}")
        lines.append(f"      - {kind.url}")
    lines.extend(["", REPORT_COPIES_NOTICE, ""])

    for usage, package in entries:
        lines.append(f"crate: {package.id}")
        lines.append(f"version(s): {', '.join(usage.versions.as_strings())}")
        lines.append(f"url: {package.url}")
        lines.append(f"license(s): {package.spdx_expression()}")
        lines.extend(package.copyright_lines())
        lines.append("")

    for kind in kinds.values():
        lines.append(kind.text)
        lines.append("")

    logger.info(
        "License report: %d package(s), %d license(s)", len(entries), len(kinds)
    )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Bill of materials
# ---------------------------------------------------------------------------


def _bom_dependency(
    identity: str,
    usage: PackageUsage,
    allow_list: AllowList,
) -> BomDependency:
    versions = tuple(usage.versions.as_strings())

    vendor = allow_list.vendor.get(identity)
    if vendor is not None:
        return BomDependency(
            identity=identity,
            url=vendor.url,
            versions=versions,
            license=DependencyLicense.vendor(),
        )

    package = allow_list.third_party.get(identity)
    if package is None:
        raise UnknownDependencyError(identity)

    open_source = []
    for lic in package.licenses:
        copyrights = lic.copyright_lines()
        open_source.append(
            OpenSourceLicense(
                spdx_short=lic.spdx_short,
                copyrights=tuple(copyrights) if copyrights is not None else None,
            )
        )

    return BomDependency(
        identity=identity,
        url=package.url,
        versions=versions,
        license=DependencyLicense(open_source=tuple(open_source)),
    )


def create_bom(
    subject: str,
    ledger: PackageLedger,
    allow_list: AllowList,
    now: Optional[datetime] = None,
) -> BillOfMaterials:
    """Build the bill of materials of ``subject``.

    ``subject`` must be a vendor package present in the build log. Every
    other non build-only package becomes a dependency, licensed either by
    the vendor or under the open source licenses of its allow-list entry.

    Args:
        subject: Identity of the package the BOM describes.
        ledger: Reconciled ledger; not modified.
        allow_list: Classification and licensing of every package.
        now: Creation time; defaults to the current UTC time.

    Raises:
        SubjectNotFoundError: ``subject`` is not in the ledger, has no
            version, or has no vendor entry.
        UnknownDependencyError: A dependency is neither vendor nor
            third-party.
    """
    linked = ledger.copy()
    prune(linked, allow_list)

    usage = linked.pop(subject)
    if usage is None:
        raise SubjectNotFoundError(subject, "not in build log")
    if not usage.versions:
        raise SubjectNotFoundError(subject, "does not include a version in build log")

    vendor = allow_list.vendor.get(subject)
    if vendor is None:
        raise SubjectNotFoundError(subject, "not in the vendor list")

    bom_subject = BomSubject(
        identity=subject,
        url=vendor.url,
        version=str(usage.versions.first()),
        target=vendor.target,
    )
    dependencies = tuple(
        _bom_dependency(identity, dep_usage, allow_list)
        for identity, dep_usage in linked.items()
    )

    timestamp = now if now is not None else datetime.now(timezone.utc)
    logger.info(
        "BOM for %s %s: %d dependencies",
        subject,
        bom_subject.version,
        len(dependencies),
    )
    return BillOfMaterials(
        timestamp=timestamp,
        subject=bom_subject,
        dependencies=dependencies,
    )
