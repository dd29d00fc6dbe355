from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from bundle_deals.core.logging_config import logger
from bundle_deals.core.settings import Settings, get_settings
from bundle_deals.engine.discount_engine import BundleDiscountEngine, get_engine
from bundle_deals.schemas.discount_output_v1 import FunctionRunResultV1

router = APIRouter(prefix="/api/bundle-deals", tags=["bundle-deals"])


# ----------------------------
# Helpers
# ----------------------------
def _line_count(payload: Dict[str, Any]) -> int:
    cart = payload.get("cart")
    lines = cart.get("lines") if isinstance(cart, dict) else None
    return len(lines) if isinstance(lines, list) else 0


def _log_obs(
    *,
    request: Request,
    endpoint: str,
    payload: Dict[str, Any],
    result: FunctionRunResultV1,
    mode: str,
    duration_ms: float,
    event: str,
) -> None:
    request_id = request.headers.get("X-Request-ID", "unknown")

    logger.bind(
        request_id=request_id,
        endpoint=endpoint,
        mode=mode,
        line_count=_line_count(payload),
        operations=len(result.operations),
        duration_ms=duration_ms,
    ).info(event)


def _run(
    request: Request,
    endpoint: str,
    payload: Dict[str, Any],
    engine: BundleDiscountEngine,
    mode: str,
) -> FunctionRunResultV1:
    t0 = time.time()
    result = engine.run(payload, mode=mode)
    duration_ms = round((time.time() - t0) * 1000, 2)

    _log_obs(
        request=request,
        endpoint=endpoint,
        payload=payload,
        result=result,
        mode=mode,
        duration_ms=duration_ms,
        event="bundle_deals_run",
    )
    return result


# ----------------------------
# Endpoints
# ----------------------------
@router.post(
    "/run",
    response_model=FunctionRunResultV1,
    response_model_exclude_none=True,
)
def run_discounts(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    engine: BundleDiscountEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> FunctionRunResultV1:
    return _run(request, "/api/bundle-deals/run", payload, engine, settings.discount_mode)


@router.post(
    "/run/order",
    response_model=FunctionRunResultV1,
    response_model_exclude_none=True,
)
def run_order_discounts(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    engine: BundleDiscountEngine = Depends(get_engine),
) -> FunctionRunResultV1:
    return _run(request, "/api/bundle-deals/run/order", payload, engine, "order")


@router.get("/config")
def get_pricing_config(
    engine: BundleDiscountEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.describe()
