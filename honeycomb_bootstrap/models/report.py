from __future__ import annotations

from pydantic import BaseModel, Field

from honeycomb_bootstrap.models.service import ServiceDescriptor


class BootstrapReport(BaseModel):
    network: str
    rpc_endpoint: str
    authority: str
    authority_created: bool
    balance_lamports: int
    project: str
    driver: str
    services: list[ServiceDescriptor] = Field(default_factory=list)
    completed_states: list[str] = Field(default_factory=list)
