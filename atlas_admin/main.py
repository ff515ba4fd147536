"""
Sandbox FastAPI application for Atlas Admin.
Serves the orders REST contract from memory so the dashboard can be run
without the production backend.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from atlas_admin.core.config import get_config
from atlas_admin.core.logging import setup_logging
from atlas_admin.api.routes import health, orders, sessions

# Initialize logging
config = get_config()
setup_logging(
    log_file=config.log_path,
    level=config.get('general', 'log_level', default='INFO')
)

app = FastAPI(
    title="Atlas Orders Sandbox API",
    description="In-memory orders API for local development of the admin dashboard",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    # Clients read the optional `message` field of error bodies
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


app.include_router(health.router)
app.include_router(orders.router)
app.include_router(sessions.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Atlas Orders Sandbox API",
        "version": "1.0.0",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "atlas_admin.main:app",
        host=config.get('sandbox', 'host', default='127.0.0.1'),
        port=config.get_int('sandbox', 'port', default=3333),
        reload=True
    )
