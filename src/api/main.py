"""
Storelens FastAPI Application
=============================

HTTP transport for the app-store intelligence tools.

Endpoints:
    GET  /api/health        - Health check
    GET  /api/tools         - List registered tools and their parameters
    POST /api/tools/{name}  - Run a tool (JSON body = tool parameters)

A tool that fails upstream still answers 200 with an error report
(`isError: true`). Only an unknown tool (404) or invalid parameters (422)
are HTTP errors.

Usage:
    uvicorn src.api.main:app --reload --port 8000

    Or with CLI:
    python -m src.api.main
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
import json
import logging
import os

from pydantic import ValidationError

from ..orchestrator.logging_config import setup_logging
from ..stores import get_settings
from .models import HealthResponse, ToolListResponse
from .services import TOOLS_REGISTRY, ToolService, UnknownToolError, list_tools

logger = logging.getLogger(__name__)

# Service
tool_service: Optional[ToolService] = None


def get_tool_service() -> ToolService:
    """Shared ToolService (created lazily outside the app lifespan, e.g. in tests)."""
    global tool_service
    if tool_service is None:
        tool_service = ToolService()
    return tool_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global tool_service

    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_logs,
        log_file=settings.logging.log_file,
    )
    logger.info(f"Starting {settings.app_name} API ({settings.environment})...")

    tool_service = ToolService(settings=settings)
    logger.info(f"{len(TOOLS_REGISTRY)} tools registered")

    yield

    tool_service.fetcher.cache.close()
    logger.info(f"Shutting down {settings.app_name} API...")


# Create FastAPI app
app = FastAPI(
    title="Storelens API",
    description="App store search, review analytics and competitive intelligence",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
# CORS_ORIGINS env var (comma-separated) adds allowed origins
_default_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra_origins = os.getenv("CORS_ORIGINS", "")
if _extra_origins:
    _default_origins.extend([o.strip() for o in _extra_origins.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=_default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH ENDPOINT
# ============================================================================

@app.get("/api/health", response_model=HealthResponse)
def health_check(service: ToolService = Depends(get_tool_service)):
    """Health check with cache statistics."""
    return HealthResponse(
        status="healthy",
        version=service.settings.app_version,
        cache=service.fetcher.cache.get_stats(),
        tools=len(TOOLS_REGISTRY),
    )


# ============================================================================
# TOOL ENDPOINTS
# ============================================================================

@app.get("/api/tools", response_model=ToolListResponse)
def get_tools():
    """List tools with the JSON schema of their parameters."""
    tools = list_tools()
    return {"tools": tools, "count": len(tools)}


@app.post("/api/tools/{name}")
def call_tool(
    name: str,
    params: Optional[Dict[str, Any]] = Body(None),
    service: ToolService = Depends(get_tool_service),
):
    """
    Run one tool.

    Returns the tool's report, or an error report if the store call or
    the analysis failed.
    """
    try:
        validated = service.validate(name, params or {})
    except UnknownToolError:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=json.loads(e.json()))

    logger.info(f"Running tool {name}")
    return service.execute(name, validated)


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("STORELENS API SERVER")
    print("=" * 60)
    print()
    print("Starting server at http://localhost:8000")
    print()
    print("API Documentation:")
    print("  - Swagger UI: http://localhost:8000/docs")
    print("  - ReDoc:      http://localhost:8000/redoc")
    print()
    print("Tools:")
    for tool_name in TOOLS_REGISTRY:
        print(f"  POST /api/tools/{tool_name}")
    print()
    print("=" * 60)

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
