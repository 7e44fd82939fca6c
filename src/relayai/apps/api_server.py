from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from relayai import __version__
from relayai.apps.runtime_support import build_dispatcher
from relayai.cli import base_parser
from relayai.core.providers.dispatcher import AIDispatcher
from relayai.core.providers.health import ClientStatus
from relayai.core.runtime.cancellation import CancelToken
from relayai.core.runtime.errors import CancellationError, ConfigurationError, ExhaustionError, TransportError


class GenerateRequest(BaseModel):
    prompt: str = Field(min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0)


class GenerateResponse(BaseModel):
    text: str
    provider: str
    forced_simulation: bool


def create_app(
    config_path: str | None = None,
    dispatcher: AIDispatcher | None = None,
    *,
    log_level: str | None = None,
) -> FastAPI:
    client = dispatcher or build_dispatcher(config_path=config_path, log_level=log_level)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        client.close()

    app = FastAPI(title="RelayAI API", version=__version__, lifespan=lifespan)

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "provider": client.provider,
            "simulation_policy": client.fallback.policy.value,
            "forced_simulation": client.forced_simulation,
            "version": __version__,
        }

    @app.get("/status", response_model=ClientStatus)
    def status() -> ClientStatus:
        return client.get_status()

    @app.post("/generate", response_model=GenerateResponse)
    def generate(payload: GenerateRequest) -> GenerateResponse:
        cancel = CancelToken(timeout_seconds=payload.timeout_seconds) if payload.timeout_seconds else None
        try:
            text = client.send_request(payload.prompt, cancel=cancel)
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=f"configuration_error: {exc}") from exc
        except CancellationError as exc:
            raise HTTPException(status_code=408, detail=f"cancelled: {exc}") from exc
        except (ExhaustionError, TransportError) as exc:
            raise HTTPException(status_code=502, detail=f"provider_unavailable: {exc}") from exc
        return GenerateResponse(text=text, provider=client.provider, forced_simulation=client.forced_simulation)

    @app.post("/simulation/reset")
    def reset_simulation() -> dict:
        client.reset_simulation()
        return {"forced_simulation": client.forced_simulation}

    return app


def main() -> int:
    parser = base_parser("relayai-api", "RelayAI operator API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    api = create_app(config_path=args.config, log_level=args.log_level)
    uvicorn.run(api, host=args.host, port=args.port, log_level=(args.log_level or "info").lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
