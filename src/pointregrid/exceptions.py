# SPDX-License-Identifier: MIT
"""
pointregrid.exceptions
======================

Error taxonomy for the regridding engine.

- :class:`ConfigurationError` – invalid parameters, raised before any data
  is processed.
- :class:`ValidationError` – malformed or out-of-range input (coordinates,
  value vectors, file headers, mapping records).
- :class:`NoSourceMatchError` – no source candidate could be found (empty
  source set, or a run whose output ended up empty).

All of them derive from :class:`PointRegridError`, so callers can catch the
whole family at once. They also derive from the matching builtin
(``ValueError`` / ``LookupError``) so plain ``except ValueError`` keeps
working.
"""

from __future__ import annotations


class PointRegridError(Exception):
    """Base class for all pointregrid errors."""


class ConfigurationError(PointRegridError, ValueError):
    """Invalid regridding parameter."""


class ValidationError(PointRegridError, ValueError):
    """Malformed or inconsistent input data."""


class NoSourceMatchError(PointRegridError, LookupError):
    """No source point could be matched."""


__all__ = [
    "PointRegridError",
    "ConfigurationError",
    "ValidationError",
    "NoSourceMatchError",
]
