from __future__ import annotations

from fastapi import FastAPI

from grok_bridge.handlers import images

app = FastAPI(title="Grok Bridge")

app.include_router(images.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
