"""Public interface for the Cloud Storage adapter."""

from __future__ import annotations

from .client import GcsObjectLister
from .schema import ListObjectsResponse, ObjectResource

__all__ = ["GcsObjectLister", "ListObjectsResponse", "ObjectResource"]
