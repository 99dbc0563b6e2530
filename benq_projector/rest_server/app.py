#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls a BenQ projector.

The server owns an in-memory property registry. The projector client
publishes state into it; PUT requests write to it, which the client turns
into projector commands.
"""

from __future__ import annotations

from fastapi import FastAPI

import time
import os
import json

from contextlib import asynccontextmanager

from .logger import logger
from ..internal_types import *
from ..client import (
    BenqProjectorClient,
    BenqProjectorClientConfig,
    InMemoryPropertyRegistry,
  )

from .api import (
    router as api_router,
    get_property_registry,
  )

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """
    projector_client: Optional[BenqProjectorClient] = None
    try:
        logger.info("Projector REST server starting up--initializing...")
        config_file = os.environ.get("BENQ_PROJECTOR_CONFIG", None)
        if config_file is None:
            if os.path.exists("benq_projector_config.json"):
                config_file = "benq_projector_config.json"
        if config_file is None:
            raw_config: JsonableDict = {}
        else:
            with open(config_file, "r") as f:
                raw_config = json.load(f)
        app.state.raw_config = raw_config
        projector_config = BenqProjectorClientConfig.from_jsonable(raw_config)
        app.state.projector_config = projector_config
        app.state.launch_time = time.monotonic()
        registry = InMemoryPropertyRegistry()
        app.state.property_registry = registry
        projector_client = await BenqProjectorClient.create(config=projector_config, registry=registry)
        app.state.projector_client = projector_client
        logger.info(f"Serving API for projector at {projector_client}...")

        logger.info("Projector REST server initialization done; starting server...")
        yield
    finally:
        logger.info("Projector REST server shutting down--cleaning up...")
        if projector_client is not None:
            await projector_client.aclose()

proj_api = FastAPI(lifespan=fastapi_lifetime)
proj_api.include_router(api_router)

