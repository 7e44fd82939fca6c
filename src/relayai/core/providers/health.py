from __future__ import annotations

from pydantic import BaseModel

from relayai.core.runtime.simulation import SimulationPolicy


class ClientStatus(BaseModel):
    provider: str
    model: str
    simulation_policy: SimulationPolicy
    forced_simulation: bool
    connected: bool
    error: str | None = None


def render_status(status: ClientStatus) -> str:
    line = (
        f"provider={status.provider} model={status.model} "
        f"simulation_policy={status.simulation_policy.value} "
        f"forced_simulation={status.forced_simulation} connected={status.connected}"
    )
    if status.error:
        line += f" error={status.error}"
    return line
