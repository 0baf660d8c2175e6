"""
License and copyright model.

The set of licenses depledger knows about is closed: every member of
:class:`LicenseKind` carries its allow-list tag, SPDX short identifier,
license text resource and whether the license has a copyright notice.
Adding a kind means supplying all four, otherwise the enum fails to
build at import time.

License texts are shipped as package data in :mod:`depledger.licenses`
and are loaded once per process by :func:`license_texts`.
"""

from __future__ import annotations

import functools
from enum import Enum
from dataclasses import dataclass
from importlib import resources
from typing import Any, Dict, List, Mapping, Optional, Tuple

from depledger.constants import COPYRIGHT_NOT_PRESENT, SPDX_URL_TEMPLATE

#: Package holding the license text resources.
LICENSE_TEXT_PACKAGE = "depledger.licenses"


class LicenseKind(Enum):
    """Licenses accepted in the allow-list.

    Each value is ``(tag, spdx_short, resource, has_copyright)``.
    """

    ISC = ("ISC", "ISC", "isc.txt", True)
    MIT = ("MIT", "MIT", "mit.txt", True)
    BSD3 = ("BSD3", "BSD-3-Clause", "bsd3.txt", True)
    OPENSSL = ("OpenSSL", "OpenSSL", "openssl.txt", False)
    BSL1 = ("BSLv1", "BSL-1.0", "bsl.txt", False)
    MPL2 = ("MPLv2", "MPL-2.0", "mpl2.txt", False)
    UNICODE_DFS_2016 = (
        "UnicodeDFS2016",
        "Unicode-DFS-2016",
        "unicode_dfs_2016.txt",
        False,
    )

    def __init__(
        self,
        tag: str,
        spdx_short: str,
        resource: str,
        has_copyright: bool,
    ) -> None:
        self.tag = tag
        self.spdx_short = spdx_short
        self.resource = resource
        self.has_copyright = has_copyright

    @property
    def url(self) -> str:
        return SPDX_URL_TEMPLATE.format(spdx=self.spdx_short)

    @property
    def text(self) -> str:
        return license_texts()[self.spdx_short]

    @classmethod
    def from_tag(cls, tag: str) -> "LicenseKind":
        """Look up a kind by its allow-list tag (``"MIT"``, ``"MPLv2"``...).

        Raises:
            ValueError: Unknown tag.
        """
        for kind in cls:
            if kind.tag == tag:
                return kind
        known = ", ".join(kind.tag for kind in cls)
        raise ValueError(f"unknown license {tag!r} (expected one of: {known})")


@functools.lru_cache(maxsize=None)
def license_texts() -> Mapping[str, str]:
    """Return every license text keyed by SPDX short identifier.

    Read from package data on first call and cached for the life of the
    process.
    """
    root = resources.files(LICENSE_TEXT_PACKAGE)
    return {
        kind.spdx_short: root.joinpath(kind.resource).read_text(encoding="utf-8").rstrip("\n")
        for kind in LicenseKind
    }


@dataclass(frozen=True)
class Copyright:
    """Copyright statement attached to a license.

    ``lines`` is ``None`` when the author provided no statement at all,
    which is recorded explicitly in the allow-list as ``"NotPresent"``.
    """

    lines: Optional[Tuple[str, ...]] = None

    @classmethod
    def of(cls, *lines: str) -> "Copyright":
        return cls(lines=tuple(lines))

    @classmethod
    def not_present(cls) -> "Copyright":
        return cls(lines=None)

    @property
    def is_present(self) -> bool:
        return self.lines is not None

    def render(self) -> List[str]:
        """Lines to print; the fixed placeholder when none were provided."""
        if self.lines is None:
            return [COPYRIGHT_NOT_PRESENT]
        return list(self.lines)

    def to_json(self) -> Any:
        if self.lines is None:
            return "NotPresent"
        return {"Lines": list(self.lines)}

    @classmethod
    def from_json(cls, data: Any) -> "Copyright":
        """Parse ``"NotPresent"`` or ``{"Lines": [...]}``.

        Raises:
            ValueError: Any other shape.
        """
        if data == "NotPresent":
            return cls.not_present()
        if isinstance(data, dict) and set(data) == {"Lines"}:
            lines = data["Lines"]
            if isinstance(lines, list) and all(isinstance(x, str) for x in lines):
                return cls(lines=tuple(lines))
        raise ValueError(
            'copyright must be "NotPresent" or {"Lines": [<string>, ...]}'
        )


@dataclass(frozen=True)
class License:
    """One license declared for a package, with its copyright if it has one."""

    kind: LicenseKind
    copyright: Optional[Copyright] = None

    def __post_init__(self) -> None:
        if self.kind.has_copyright and self.copyright is None:
            raise ValueError(f"license {self.kind.tag} requires a copyright")
        if not self.kind.has_copyright and self.copyright is not None:
            raise ValueError(f"license {self.kind.tag} does not take a copyright")

    @property
    def spdx_short(self) -> str:
        return self.kind.spdx_short

    @property
    def url(self) -> str:
        return self.kind.url

    @property
    def text(self) -> str:
        return self.kind.text

    def copyright_lines(self) -> Optional[List[str]]:
        """Rendered copyright lines, or None for text-only licenses."""
        if self.copyright is None:
            return None
        return self.copyright.render()

    def to_json(self) -> Any:
        if self.copyright is None:
            return self.kind.tag
        return {self.kind.tag: {"copyright": self.copyright.to_json()}}

    @classmethod
    def from_json(cls, data: Any) -> "License":
        """Parse an allow-list license entry.

        Text-only licenses are bare strings (``"MPLv2"``); licenses with a
        copyright are single-key objects
        (``{"MIT": {"copyright": "NotPresent"}}``).

        Raises:
            ValueError: Unknown license or malformed entry.
        """
        if isinstance(data, str):
            return cls(LicenseKind.from_tag(data))

        if isinstance(data, dict) and len(data) == 1:
            ((tag, body),) = data.items()
            kind = LicenseKind.from_tag(tag)
            if not isinstance(body, dict) or set(body) != {"copyright"}:
                raise ValueError(f'license {tag} must be {{"copyright": ...}}')
            return cls(kind, Copyright.from_json(body["copyright"]))

        raise ValueError("license must be a string or a single-key object")


def summarize(licenses: List[License]) -> Dict[str, LicenseKind]:
    """Distinct license kinds keyed by SPDX id, ascending."""
    kinds = {lic.spdx_short: lic.kind for lic in licenses}
    return {spdx: kinds[spdx] for spdx in sorted(kinds)}
