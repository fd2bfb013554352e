"""
Building Layout Service – FastAPI Backend

Main entry point. Sets up logging and CORS and includes all routes.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config import APP_VERSION, CORS_ORIGINS, LOG_LEVEL

# Import route modules
from routes.common_layout import router as common_layout_router
from routes.buildings import router as buildings_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Building Layout Service",
    description="Convert zipped building shapefiles into normalized floor layouts",
    version=APP_VERSION,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(common_layout_router)
app.include_router(buildings_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": APP_VERSION}


if __name__ == "__main__":
    import uvicorn
    from config import HOST, PORT
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
