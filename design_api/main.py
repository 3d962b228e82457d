import os
import logging

from dotenv import load_dotenv

# Settings may come from a local .env file; real environment variables win
load_dotenv()

LOG_LEVEL_NAME = os.getenv("WFC_LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)

import uuid
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from design_api.constants import (
    DEFAULT_FILL_METHOD,
    DEFAULT_INCLUDE_EMPTY,
    DEFAULT_INCLUDE_OUT,
    DEFAULT_PRECISION,
    DEFAULT_SLOT_DIAGONAL,
)
from design_api.services.mapping import ShapeMappingError, map_shapes
from design_api.services.rules import collect_rules
from design_api.services.slots import Plane, populate_geometry_with_slot_centers
from design_api.services.slots.populate import validate_parameters
from design_api.services.validator import ValidationError, parse_modules, parse_rules

logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("WFC_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

app = FastAPI(title="WFC Toolset API")

# Allow local front-end to call this API
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CollectRulesRequest(BaseModel):
    modules: Optional[List[Dict[str, Any]]] = None
    rules_allowed: Optional[List[Dict[str, Any]]] = None
    rules_disallowed: Optional[List[Dict[str, Any]]] = None
    include_out: bool = DEFAULT_INCLUDE_OUT
    include_empty: bool = DEFAULT_INCLUDE_EMPTY


class PlaneModel(BaseModel):
    origin: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    x_axis: List[float] = Field(default_factory=lambda: [1.0, 0.0, 0.0])
    y_axis: List[float] = Field(default_factory=lambda: [0.0, 1.0, 0.0])


class PopulateRequest(BaseModel):
    geometry: Optional[List[Optional[Dict[str, Any]]]] = None
    base_plane: PlaneModel = Field(default_factory=PlaneModel)
    diagonal: List[float] = Field(default_factory=lambda: list(DEFAULT_SLOT_DIAGONAL))
    fill: Literal[0, 1, 2] = DEFAULT_FILL_METHOD
    precision: float = DEFAULT_PRECISION


@app.get("/health", response_model=dict)
async def health():
    return {"status": "ok"}


@app.post("/rules/collect", response_model=dict)
async def collect_rules_endpoint(req: CollectRulesRequest):
    """Collect, convert to explicit, deduplicate and remove disallowed rules."""
    request_id = str(uuid.uuid4())
    try:
        modules = parse_modules(req.modules)
        rules_allowed = parse_rules(req.rules_allowed)
        rules_disallowed = parse_rules(req.rules_disallowed)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        rules = collect_rules(
            modules,
            rules_allowed,
            rules_disallowed,
            include_out=req.include_out,
            include_empty=req.include_empty,
        )
    except Exception as exc:
        logger.exception("Error collecting rules", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=str(exc))

    if rules is None:
        return {"ready": False, "rules": []}
    logger.debug("collect_rules produced %d rules", len(rules), extra={"request_id": request_id})
    return {"ready": True, "rules": [rule.to_dict() for rule in rules]}


@app.post("/slots/populate", response_model=dict)
async def populate_slots_endpoint(req: PopulateRequest):
    """Populate geometry with points ready to be used as WFC slot centers."""
    request_id = str(uuid.uuid4())
    error = validate_parameters(req.diagonal, req.fill, req.precision)
    if error is not None:
        raise HTTPException(status_code=400, detail=error)
    try:
        base_plane = Plane(
            origin=tuple(req.base_plane.origin),
            x_axis=tuple(req.base_plane.x_axis),
            y_axis=tuple(req.base_plane.y_axis),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid base plane: {exc}")
    try:
        geometry = map_shapes(req.geometry, request_id=request_id)
    except ShapeMappingError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        centers = populate_geometry_with_slot_centers(
            geometry,
            base_plane=base_plane,
            diagonal=req.diagonal,
            fill_method=req.fill,
            precision=req.precision,
        )
    except Exception as exc:
        logger.exception("Error populating slots", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=str(exc))

    if centers is None:
        return {"ready": False, "slot_centers": []}
    return {"ready": True, "slot_centers": centers.tolist()}
