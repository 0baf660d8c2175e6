"""License text bodies shipped with depledger, one file per SPDX license."""
