# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that exposes a BenQ projector's state as properties.
"""
from .app import proj_api, get_property_registry
