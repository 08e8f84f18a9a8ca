"""Ordered middleware stages wrapped around the FastAPI router.

Stages are listed outermost first. Order matters:

- ``cors`` is outermost so every response, including fault responses,
  carries the CORS headers.
- ``faults`` wraps every later stage so it observes all their faults.
- ``raw_body`` must run before ``parsed_body`` for the webhook path,
  otherwise the webhook signature would be checked against re-encoded data.
"""

from dataclasses import dataclass, field
from typing import Any

from starlette.middleware import Middleware

from messagemind.app import App
from messagemind.errors import PipelineOrderError
from messagemind.web.body import ParsedBodyMiddleware, RawBodyMiddleware
from messagemind.web.cors import CorsPolicy, CredentialedCORSMiddleware
from messagemind.web.faults import FaultHandlerMiddleware
from messagemind.web.paths import STRIPE_WEBHOOK_PATH

CORS = "cors"
FAULTS = "faults"
RAW_BODY = "raw_body"
PARSED_BODY = "parsed_body"


@dataclass(frozen=True)
class Stage:
    name: str
    middleware_class: type
    options: dict[str, Any] = field(default_factory=dict)

    def to_middleware(self) -> Middleware:
        return Middleware(self.middleware_class, **self.options)


def build_pipeline(app: App) -> list[Stage]:
    config = app.config
    return [
        Stage(CORS, CredentialedCORSMiddleware, {"policy": CorsPolicy.from_config(config)}),
        Stage(FAULTS, FaultHandlerMiddleware, {"expose_details": app.expose_error_details}),
        Stage(RAW_BODY, RawBodyMiddleware, {"path": STRIPE_WEBHOOK_PATH, "limit": config.webhook_max_body_size}),
        Stage(PARSED_BODY, ParsedBodyMiddleware, {"limit": config.max_body_size}),
    ]


def validate_pipeline(stages: list[Stage]) -> None:
    """Raise PipelineOrderError if the stages break an ordering rule."""
    names = [stage.name for stage in stages]
    if len(set(names)) != len(names):
        raise PipelineOrderError(f"Duplicate pipeline stages: {names}")

    for required in (CORS, FAULTS, RAW_BODY, PARSED_BODY):
        if required not in names:
            raise PipelineOrderError(f"Missing pipeline stage: {required}")

    if names.index(FAULTS) != names.index(CORS) + 1:
        raise PipelineOrderError("Fault handler must directly follow CORS")
    if names.index(RAW_BODY) > names.index(PARSED_BODY):
        raise PipelineOrderError("Raw body stage must precede the parsed body stage")

    raw_stage = stages[names.index(RAW_BODY)]
    if raw_stage.options.get("path") != STRIPE_WEBHOOK_PATH:
        raise PipelineOrderError(f"Raw body stage must match {STRIPE_WEBHOOK_PATH}")


def build_middleware(app: App) -> list[Middleware]:
    """Validated middleware list, outermost first, as FastAPI expects it."""
    stages = build_pipeline(app)
    validate_pipeline(stages)
    return [stage.to_middleware() for stage in stages]
