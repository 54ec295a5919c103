"""Failure kinds shared by service result objects.

Routes translate a kind to an HTTP status; services never import Flask.
"""

from __future__ import annotations

REJECTED = "rejected"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
