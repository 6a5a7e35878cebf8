#!/usr/bin/env python3
"""Production server runner for the habitpals backend"""

import os

import uvicorn

if __name__ == "__main__":  # pragma: no cover
    uvicorn.run(
        "app:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3700")),
        reload=False,
        workers=int(os.getenv("WEB_CONCURRENCY", "2")),
        log_level="info",
        proxy_headers=True,
    )
