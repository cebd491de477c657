"""Cut Tracker Server - Entry point.

Runs the MCP server plus a few plain HTTP routes for data export and import.
Uses Starlette with the MCP HTTP app mounted at the root.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Mount, Route

from .shell.mcp_server import get_store, mcp, set_store
from .shell.store import AppStore
from .shell.transfer import ImportFormatError, export_csv, export_json, import_json


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "cuttracker"})


async def export_json_route(request: Request) -> Response:
    """Download the whole state as JSON."""
    return Response(
        export_json(get_store().state),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="cuttracker.json"'},
    )


async def export_csv_route(request: Request) -> PlainTextResponse:
    """Download one row per meal as CSV."""
    return PlainTextResponse(
        export_csv(get_store().state),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="cuttracker.csv"'},
    )


async def import_route(request: Request) -> JSONResponse:
    """Replace the whole state with an uploaded JSON export."""
    body = await request.body()
    try:
        state = import_json(body)
    except ImportFormatError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    if not get_store().replace_state(state):
        return JSONResponse({"error": "Import failed while saving."}, status_code=500)

    return JSONResponse({
        "success": True,
        "logs": len(state.logs),
        "foods": len(state.foods),
        "templates": len(state.templates),
    })


# ==================== Create ASGI App ====================


def create_app(store: AppStore | None = None) -> Starlette:
    """Create the Starlette application with MCP at root.

    Args:
        store: Store to serve; the default JSON-file store is created lazily if None
    """
    if store is not None:
        set_store(store)

    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/export/json", export_json_route, methods=["GET"]),
        Route("/export/csv", export_csv_route, methods=["GET"]),
        Route("/import", import_route, methods=["POST"]),
        # Mount MCP app at root - it handles /mcp/ path internally
        Mount("/", app=mcp_app),
    ]

    return Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["http://localhost:5173"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "127.0.0.1")

    logger.info("Starting Cut Tracker on %s:%d", host, port)

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
