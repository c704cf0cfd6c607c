#!/usr/bin/env python3
"""
Main FastAPI application for the Flores&Boxes storefront backend.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..data.models import utcnow
from ..errors import DuplicateLeadError, OrderNotFoundError
from ..schemas.io_models import CampaignRequest, InboundMessage, LeadCreate
from ..schemas.order_models import OrderCreate, PaymentNotification, StatusUpdate
from ..utils.logger import get_logger
from .config import Config
from .container import Services, build_services

logger = get_logger("api")

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'

router = APIRouter()


def get_services(request: Request) -> Services:
    return request.app.state.services


def error_response(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


# ----- orders -----

@router.post("/api/orders")
def create_order(payload: Any = Body(None), services: Services = Depends(get_services)):
    """Create an order and, for MercadoPago, the hosted checkout session."""
    try:
        order = OrderCreate.model_validate(payload)
        return services.checkout.create_order(order)
    except Exception as e:
        logger.exception("Order creation failed")
        return error_response(e)


@router.get("/api/orders")
def list_orders(services: Services = Depends(get_services)):
    return [o.to_dict() for o in services.orders.list_all()]


@router.get("/api/orders/{order_id}")
def get_order(order_id: str, services: Services = Depends(get_services)):
    try:
        return services.orders.get(order_id).to_dict()
    except OrderNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Not found"})


@router.patch("/api/orders/{order_id}/status")
def update_order_status(order_id: str, payload: Any = Body(None), services: Services = Depends(get_services)):
    """Admin override; any known status can follow any other."""
    try:
        update = StatusUpdate.model_validate(payload)
        order = services.orders.set_status(order_id, update.status)
    except Exception as e:
        logger.exception("Status update for %s failed", order_id)
        return error_response(e)
    return order.to_dict() if order else None


# ----- MercadoPago -----

@router.post("/api/mp-webhook")
def mercadopago_webhook(payload: Any = Body(None), services: Services = Depends(get_services)):
    """A 500 makes MercadoPago redeliver the notification."""
    try:
        notification = PaymentNotification.model_validate(payload or {})
        services.reconciler.reconcile(notification)
    except Exception:
        logger.exception("MP webhook error")
        return PlainTextResponse("Internal Server Error", status_code=500)
    return PlainTextResponse("OK")


# ----- leads -----

@router.post("/api/leads")
def subscribe_lead(payload: Any = Body(None), services: Services = Depends(get_services)):
    try:
        body = LeadCreate.model_validate(payload)
        lead = services.leads.upsert(body.email, body.name, "popup")
        services.notifier.send_welcome(lead)
        return {"success": True, "lead": lead.to_dict()}
    except DuplicateLeadError:
        return {"success": True, "message": "already subscribed"}
    except Exception as e:
        logger.exception("Lead signup failed")
        return error_response(e)


@router.get("/api/leads")
def list_leads(services: Services = Depends(get_services)):
    return [lead.to_dict() for lead in services.leads.list_all()]


@router.post("/api/leads/campaign")
def send_campaign(payload: Any = Body(None), services: Services = Depends(get_services)):
    try:
        body = CampaignRequest.model_validate(payload)
        leads = services.leads.segment(body.segment)
        sent = services.notifier.send_campaign(leads, body.subject, body.html)
        return {"success": True, "sent": sent}
    except Exception as e:
        logger.exception("Campaign failed")
        return error_response(e)


# ----- WhatsApp -----

@router.post("/api/whatsapp-webhook")
async def whatsapp_webhook(request: Request, services: Services = Depends(get_services)):
    """Twilio posts form-encoded fields; JSON is accepted for manual testing."""
    try:
        if request.headers.get("content-type", "").startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
        inbound = InboundMessage.model_validate(data or {})

        if not inbound.Body or not inbound.From:
            return Response(status_code=200)

        await run_in_threadpool(
            services.assistant.handle_inbound, inbound.From, inbound.Body, inbound.ProfileName
        )
    except Exception:
        logger.exception("WhatsApp webhook error")
        return PlainTextResponse("Internal Server Error", status_code=500)
    return Response(content=EMPTY_TWIML, media_type="text/xml")


@router.get("/api/chats")
def list_chats(services: Services = Depends(get_services)):
    return [c.to_dict() for c in services.sessions.latest_chats(Config.CHATS_PAGE_SIZE)]


# ----- analytics -----

@router.get("/api/analytics/summary")
def analytics_summary(services: Services = Depends(get_services)):
    return services.analytics.summary()


@router.get("/api/analytics/revenue-weekly")
def analytics_revenue_weekly(services: Services = Depends(get_services)):
    return services.analytics.revenue_weekly()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": utcnow().isoformat()}


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        services: Prebuilt service graph; when omitted one is built from
            ``Config`` at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "services", None) is None:
            owned = build_services()
            app.state.services = owned
        logger.info("🌸 Flores&Boxes backend ready")
        yield
        if owned is not None:
            owned.close()

    app = FastAPI(
        title="Flores&Boxes API",
        description="Orders, payments, email and WhatsApp assistant for Flores&Boxes",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[Config.FRONTEND_URL] if Config.FRONTEND_URL else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    if services is not None:
        app.state.services = services
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
