from __future__ import annotations
import datetime
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .settings import settings
from .hashing import from_hex, get_engine, to_hex
from .logutil import setup_logging
from .merkle import InvalidIndexError, build, prove
from .models import (
    BlocksPayload,
    BuildResponse,
    InclusionProofModel,
    ProveRequest,
    VerifyRequest,
    VerifyResponse,
)
from .verify import verify
from .middleware.size_limit import SizeLimitMiddleware

logger = logging.getLogger(__name__)

setup_logging(settings.log_level)

app = FastAPI(title="Merkle Proof Service")
app.add_middleware(SizeLimitMiddleware)


@app.exception_handler(RequestValidationError)
async def _invalid_payload(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": "payload schema invalid"}, status_code=400)


def _engine(name):
    try:
        return get_engine(name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _blocks(payload: BlocksPayload):
    if payload.count() > settings.max_blocks:
        raise HTTPException(status_code=413, detail="too many blocks")
    return payload.blocks()


@app.post("/merkle/build", response_model=BuildResponse)
async def merkle_build(payload: BlocksPayload):
    engine = _engine(payload.algorithm)
    tree = build(_blocks(payload), engine)
    root = tree.root_digest
    logger.info("build leaves=%d algorithm=%s", tree.leaf_count, engine.name)
    return BuildResponse(
        algorithm=engine.name,
        leaf_count=tree.leaf_count,
        height=tree.height,
        root_hex=to_hex(root) if root is not None else None,
    )


@app.post("/merkle/prove", response_model=InclusionProofModel)
async def merkle_prove(payload: ProveRequest):
    engine = _engine(payload.algorithm)
    tree = build(_blocks(payload), engine)
    try:
        proof = prove(tree, payload.leaf_index)
    except InvalidIndexError:
        raise HTTPException(status_code=400, detail="leaf index out of range")
    return InclusionProofModel.from_proof(
        proof,
        root=tree.root_digest,
        leaf_index=payload.leaf_index,
        leaf_count=tree.leaf_count,
        algorithm=engine.name,
    )


@app.post("/merkle/verify", response_model=VerifyResponse)
async def merkle_verify(payload: VerifyRequest):
    doc = payload.proof
    engine = _engine(doc.algorithm)
    try:
        steps = doc.to_proof()
        root = doc.root() if payload.root_hex is None else from_hex(payload.root_hex)
    except ValueError:
        # wrong-length digests cannot authenticate anything
        return VerifyResponse(valid=False)
    ok = verify(
        payload.data(),
        steps,
        root,
        leaf_index=doc.leaf_index,
        leaf_count=doc.leaf_count,
        engine=engine,
    )
    logger.info("verify leaf_index=%d valid=%s", doc.leaf_index, ok)
    return VerifyResponse(valid=ok)


@app.get("/healthz")
async def healthz():
    return {
        "ok": True,
        "algorithm": settings.hash_algorithm,
        "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }
