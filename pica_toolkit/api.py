from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
import logging

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import get_settings
from .errors import (
    AccessError,
    FormatError,
    MissingVariableError,
    PicaError,
    RemoteError,
    UnknownActionError,
)
from .tool_registry import ToolSchemaGenerator
from .toolkit import get_toolkit, reset_toolkit

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    FormatError: 400,
    MissingVariableError: 400,
    AccessError: 403,
    UnknownActionError: 404,
    RemoteError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Pica tool server...")
    toolkit = get_toolkit()
    app.state.tools = toolkit.tools()

    yield

    logger.info("Shutting down...")
    await reset_toolkit()


app = FastAPI(
    title="Pica Tool Server",
    description="Pica actions exposed as callable tools for LLM agents",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(PicaError)
async def pica_error_handler(request: Request, exc: PicaError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "pica-tools"}


@app.get("/tools")
async def list_tools(request: Request):
    """List tool schemas in the OpenAI function calling format."""
    return {"tools": ToolSchemaGenerator.generate_schemas(request.app.state.tools.list_tools())}


@app.post("/tools/{tool_name}")
async def invoke_tool(
    tool_name: str,
    request: Request,
    arguments: Optional[Dict[str, Any]] = Body(default=None),
):
    """
    Invoke a tool with JSON arguments.

    Passthrough failures come back as a 200 with a failure result so the
    agent can read the error and choose another action.
    """
    registry = request.app.state.tools
    if tool_name not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    logger.info(f"Invoking tool: {tool_name}")
    try:
        return await registry.invoke(tool_name, arguments or {})
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_input=False, include_context=False),
        )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pica_toolkit.api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
