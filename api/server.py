"""
FastAPI surface for running a scan over HTTP. Scans run synchronously in
the request; the response carries the results and the summary.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from core.config import VERSION, settings
from pipeline.orchestrator import Orchestrator

log = logging.getLogger(__name__)

app = FastAPI(title="tcpsweep API", version=VERSION)


class ScanPayload(BaseModel):
    target: str
    ports: Optional[str] = None
    concurrency: Optional[int] = Field(None, ge=1)
    timeout_ms: Optional[int] = Field(None, ge=1)
    verbose: bool = False


@app.post("/api/scan")
def api_scan(payload: ScanPayload):
    orch = Orchestrator()
    try:
        timeout = payload.timeout_ms / 1000 if payload.timeout_ms else None
        stream = orch.scan(
            payload.target,
            payload.ports,
            concurrency=payload.concurrency,
            timeout=timeout,
            max_probes=settings.api_max_probes,
        )
        results = [r.model_dump(mode="json") for r in stream if payload.verbose or r.is_open]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        log.exception("scan failed")
        raise HTTPException(status_code=500, detail="scan failed") from exc

    results.sort(key=lambda r: (r["address"], r["port"]))
    return {"results": results, "summary": orch.summary.model_dump(mode="json")}


@app.get("/api/health")
def api_health():
    return {"status": "ok", "version": VERSION}
