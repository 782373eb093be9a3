"""Shared router that tool modules register their endpoints on."""

from __future__ import annotations

from fastapi import APIRouter

mcp_router = APIRouter()
