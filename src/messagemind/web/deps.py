from typing import Annotated, Any, cast

from fastapi import Depends, Request

from messagemind.app import App
from messagemind.web.body import PARSED_BODY_KEY, RAW_BODY_KEY


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_parsed_body(request: Request) -> Any:
    """Structured body decoded by the parsed-body stage."""
    return getattr(request.state, PARSED_BODY_KEY, {})


async def get_raw_body(request: Request) -> bytes:
    """Unparsed body captured by the raw-body stage, or the body as received."""
    raw = getattr(request.state, RAW_BODY_KEY, None)
    if raw is None:
        return await request.body()
    return cast(bytes, raw)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ParsedBodyDep = Annotated[Any, Depends(get_parsed_body)]
RawBodyDep = Annotated[bytes, Depends(get_raw_body)]
