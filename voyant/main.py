"""
FastAPI application entry point.

Assembles the FastAPI app with the chat router.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voyant.graph.chat_api import router as chat_router
from voyant.shared.logging import setup_logging


# ============================================================================
# Logging configuration (single source of truth for the service)
# ============================================================================
setup_logging(logger_name="")


# Create FastAPI app
app = FastAPI(
    title="Voyant",
    description="Conversational travel assistant built with LangGraph",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Voyant",
        "version": "0.1.0",
        "endpoints": {
            "chat": "/api/chat",
            "receipts": "/api/chat/{thread_id}/receipts",
            "health": "/health",
        },
        "intents": [
            "weather",
            "destinations",
            "packing",
            "attractions",
            "policy",
            "web_search",
        ],
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


def main():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))


if __name__ == "__main__":
    main()
