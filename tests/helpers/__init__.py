"""Test helper utilities for adolinks."""

from tests.helpers.ado_server import FakeAdoServer, ado_api_client

__all__ = ["FakeAdoServer", "ado_api_client"]
