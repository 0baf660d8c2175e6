"""
Allow-list model.

The allow-list is the hand-curated JSON record of every package a build
may link, sorted into three disjoint categories:

- ``build_only``: packages used to build but never distributed
- ``vendor``: packages licensed by the vendor under a custom license
- ``third_party``: open source packages, with their licenses

Example::

    {
      "build_only": ["cc"],
      "vendor": {"my-app": {"url": "https://git.example.com/my-app"}},
      "third_party": {
        "serde": {
          "id": "serde",
          "source": "crates.io",
          "licenses": [{"MIT": {"copyright": "NotPresent"}}, "MPLv2"]
        }
      }
    }

A package missing from all three categories is never treated as allowed;
the reconciler reports it as a violation.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from depledger.constants import CRATES_IO_URL_TEMPLATE
from depledger.exceptions import ConfigError
from depledger.models.licenses import License
from depledger.utils.filesystem import safe_read_file
from depledger.utils.logger import get_logger

logger = get_logger("allow_list")

_TOP_LEVEL_KEYS = ("build_only", "vendor", "third_party")


class Source(Enum):
    """Where a third-party package is published."""

    CRATES_IO = "crates.io"

    def package_url(self, package_id: str) -> str:
        if self is Source.CRATES_IO:
            return CRATES_IO_URL_TEMPLATE.format(id=package_id)
        raise AssertionError(f"unhandled source {self!r}")


@dataclass
class ThirdPartyPackage:
    """An allowed open source package.

    Attributes:
        id: Canonical package id, as published.
        source: Registry the package comes from.
        licenses: Licenses that all apply to the package, in order.
    """

    id: str
    source: Source = Source.CRATES_IO
    licenses: List[License] = field(default_factory=list)

    @property
    def url(self) -> str:
        return self.source.package_url(self.id)

    def spdx_expression(self) -> str:
        return " AND ".join(lic.spdx_short for lic in self.licenses)

    def copyright_lines(self) -> List[str]:
        """Copyright lines of every license that has a copyright notice."""
        lines: List[str] = []
        for lic in self.licenses:
            lines.extend(lic.copyright_lines() or [])
        return lines

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "licenses": [lic.to_json() for lic in self.licenses],
        }


@dataclass
class TargetInfo:
    """Product metadata for a vendor package that is the subject of a BOM."""

    name: str
    version: str
    license_url: str

    def to_json(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "license_url": self.license_url,
        }


@dataclass
class VendorPackage:
    """A package licensed by the vendor.

    Attributes:
        url: SCM URL where the package lives.
        target: Optional product metadata, used when the package is the
            subject of a bill of materials.
    """

    url: str
    target: Optional[TargetInfo] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url}
        if self.target is not None:
            data["target"] = self.target.to_json()
        return data


@dataclass
class AllowList:
    """Parsed allow-list.

    Attributes:
        build_only: Identities excluded from distribution concerns.
        vendor: Vendor-licensed packages by identity.
        third_party: Allowed open source packages by identity.
        source_path: File the allow-list was loaded from, if any.
    """

    build_only: Set[str] = field(default_factory=set)
    vendor: Dict[str, VendorPackage] = field(default_factory=dict)
    third_party: Dict[str, ThirdPartyPackage] = field(default_factory=dict)

    # Metadata (not part of the document)
    source_path: Optional[Path] = field(default=None, repr=False, compare=False)

    def categories_of(self, identity: str) -> List[str]:
        """Names of the categories listing ``identity``."""
        found = []
        if identity in self.build_only:
            found.append("build_only")
        if identity in self.vendor:
            found.append("vendor")
        if identity in self.third_party:
            found.append("third_party")
        return found

    def overlaps(self) -> Dict[str, List[str]]:
        """Identities listed in more than one category."""
        identities = set(self.build_only) | set(self.vendor) | set(self.third_party)
        result = {}
        for identity in sorted(identities):
            categories = self.categories_of(identity)
            if len(categories) > 1:
                result[identity] = categories
        return result

    def validate(self) -> None:
        """Check the categories are disjoint.

        Raises:
            ConfigError: An identity appears in several categories.
        """
        overlaps = self.overlaps()
        if overlaps:
            listed = "; ".join(
                f"{identity} ({', '.join(categories)})"
                for identity, categories in overlaps.items()
            )
            raise ConfigError(
                f"Packages listed in more than one category: {listed}",
                config_path=str(self.source_path) if self.source_path else None,
            )

    def to_json(self) -> Dict[str, Any]:
        return {
            "build_only": sorted(self.build_only),
            "vendor": {
                identity: self.vendor[identity].to_json()
                for identity in sorted(self.vendor)
            },
            "third_party": {
                identity: self.third_party[identity].to_json()
                for identity in sorted(self.third_party)
            },
        }

    def dumps(self) -> str:
        """Serialize to pretty-printed JSON with a trailing newline."""
        return json.dumps(self.to_json(), indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_allow_list(path: Union[str, Path]) -> AllowList:
    """Read and validate an allow-list JSON file.

    Raises:
        FileOperationError: The file cannot be read.
        ConfigError: Invalid JSON, unknown keys, bad entries, or an
            identity listed in several categories.
    """
    path = Path(path)
    logger.info("Loading allow-list from %s", path)
    allow_list = loads_allow_list(safe_read_file(path), config_path=str(path))
    allow_list.source_path = path
    logger.debug(
        "Allow-list: %d build-only, %d vendor, %d third-party",
        len(allow_list.build_only),
        len(allow_list.vendor),
        len(allow_list.third_party),
    )
    return allow_list


def loads_allow_list(text: str, *, config_path: Optional[str] = None) -> AllowList:
    """Parse an allow-list from a JSON string."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Invalid JSON in allow-list: {exc}",
            config_path=config_path,
        ) from exc

    allow_list = parse_allow_list(raw, config_path=config_path)
    allow_list.validate()
    return allow_list


def parse_allow_list(raw: Any, *, config_path: Optional[str] = None) -> AllowList:
    """Build an :class:`AllowList` from decoded JSON.

    Rejects unknown keys and type mismatches, like the settings loader.
    """
    section = _expect_mapping(raw, "allow-list", config_path)

    unknown = set(section) - set(_TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(
            f"Unknown allow-list keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )
    missing = [key for key in _TOP_LEVEL_KEYS if key not in section]
    if missing:
        raise ConfigError(
            f"Missing allow-list keys: {', '.join(missing)}",
            config_path=config_path,
        )

    build_only = section["build_only"]
    if not isinstance(build_only, list) or not all(
        isinstance(item, str) for item in build_only
    ):
        raise ConfigError(
            "build_only must be a list of package names",
            config_path=config_path,
            option="build_only",
        )

    vendor = {
        identity: _parse_vendor(identity, entry, config_path)
        for identity, entry in _expect_mapping(
            section["vendor"], "vendor", config_path
        ).items()
    }
    third_party = {
        identity: _parse_third_party(identity, entry, config_path)
        for identity, entry in _expect_mapping(
            section["third_party"], "third_party", config_path
        ).items()
    }

    return AllowList(
        build_only=set(build_only),
        vendor=vendor,
        third_party=third_party,
    )


def _expect_mapping(
    value: Any,
    option: str,
    config_path: Optional[str],
) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(
            f"{option} must be an object, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    return value


def _expect_keys(
    entry: Mapping[str, Any],
    *,
    required: Set[str],
    optional: Set[str],
    option: str,
    config_path: Optional[str],
) -> None:
    unknown = set(entry) - required - optional
    if unknown:
        raise ConfigError(
            f"Unknown keys in {option}: {', '.join(sorted(unknown))}",
            config_path=config_path,
            option=option,
        )
    missing = required - set(entry)
    if missing:
        raise ConfigError(
            f"Missing keys in {option}: {', '.join(sorted(missing))}",
            config_path=config_path,
            option=option,
        )


def _expect_strings(
    entry: Mapping[str, Any],
    keys: Set[str],
    *,
    option: str,
    config_path: Optional[str],
) -> None:
    for key in sorted(keys & set(entry)):
        value = entry[key]
        if not isinstance(value, str):
            raise ConfigError(
                f"{option}.{key} must be a string, got {type(value).__name__}",
                config_path=config_path,
                option=f"{option}.{key}",
            )


def _parse_vendor(
    identity: str,
    entry: Any,
    config_path: Optional[str],
) -> VendorPackage:
    option = f"vendor.{identity}"
    entry = _expect_mapping(entry, option, config_path)
    _expect_keys(
        entry,
        required={"url"},
        optional={"target"},
        option=option,
        config_path=config_path,
    )
    _expect_strings(entry, {"url"}, option=option, config_path=config_path)

    target = None
    if entry.get("target") is not None:
        target_option = f"{option}.target"
        target_entry = _expect_mapping(entry["target"], target_option, config_path)
        target_keys = {"name", "version", "license_url"}
        _expect_keys(
            target_entry,
            required=target_keys,
            optional=set(),
            option=target_option,
            config_path=config_path,
        )
        _expect_strings(
            target_entry, target_keys, option=target_option, config_path=config_path
        )
        target = TargetInfo(**target_entry)

    return VendorPackage(url=entry["url"], target=target)


def _parse_third_party(
    identity: str,
    entry: Any,
    config_path: Optional[str],
) -> ThirdPartyPackage:
    option = f"third_party.{identity}"
    entry = _expect_mapping(entry, option, config_path)
    _expect_keys(
        entry,
        required={"id", "source", "licenses"},
        optional=set(),
        option=option,
        config_path=config_path,
    )
    _expect_strings(entry, {"id", "source"}, option=option, config_path=config_path)

    try:
        source = Source(entry["source"])
    except ValueError as exc:
        raise ConfigError(
            f"Unsupported source {entry['source']!r} for {identity}",
            config_path=config_path,
            option=f"{option}.source",
        ) from exc

    raw_licenses = entry["licenses"]
    if not isinstance(raw_licenses, list):
        raise ConfigError(
            f"{option}.licenses must be a list",
            config_path=config_path,
            option=f"{option}.licenses",
        )

    licenses = []
    for index, raw in enumerate(raw_licenses):
        try:
            licenses.append(License.from_json(raw))
        except ValueError as exc:
            raise ConfigError(
                f"Invalid license for {identity}: {exc}",
                config_path=config_path,
                option=f"{option}.licenses[{index}]",
            ) from exc

    return ThirdPartyPackage(id=entry["id"], source=source, licenses=licenses)
