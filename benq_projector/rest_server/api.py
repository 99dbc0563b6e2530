#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST API routes for the BenQ projector server.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from .logger import logger
from ..internal_types import *
from ..version import __version__ as pkg_version
from ..client import InMemoryPropertyRegistry

router = APIRouter(prefix="/api/v1")

class PropertyWrite(BaseModel):
    value: Union[bool, int, str]

def get_property_registry(request: Request) -> InMemoryPropertyRegistry:
    return request.app.state.property_registry

@router.get("/version")
async def get_version() -> Dict[str, Any]:
    return { "version": pkg_version }

@router.get("/connection")
async def get_connection(
        registry: InMemoryPropertyRegistry = Depends(get_property_registry),
      ) -> Dict[str, Any]:
    return { "connected": registry.connected }

@router.get("/properties")
async def list_properties(
        registry: InMemoryPropertyRegistry = Depends(get_property_registry),
      ) -> List[Dict[str, Any]]:
    return [info.to_jsonable() for info in registry.properties()]

@router.get("/properties/{name}")
async def get_property(
        name: str,
        registry: InMemoryPropertyRegistry = Depends(get_property_registry),
      ) -> Dict[str, Any]:
    info = registry.get(name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Unknown property: {name}")
    return info.to_jsonable()

@router.put("/properties/{name}")
async def put_property(
        name: str,
        body: PropertyWrite,
        registry: InMemoryPropertyRegistry = Depends(get_property_registry),
      ) -> Dict[str, Any]:
    """Writes a property on behalf of the user; the projector client sends the matching command."""
    info = registry.get(name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Unknown property: {name}")
    logger.debug(f"REST write: {name}={body.value!r}")
    registry.write(name, body.value)
    return info.to_jsonable()
