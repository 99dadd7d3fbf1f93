import logging

import stripe
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from clubero import config
from clubero.database import Base, engine, get_db
from clubero.errors import ClubError
from clubero.reconciliation import PaymentReconciler
from clubero.routes import router
from clubero.stripe_service import CheckoutSession, get_gateway

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Clubero Payment Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.client_domain()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(ClubError)
async def club_error_handler(request: Request, exc: ClubError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Clubero server is running!"


RECONCILED_EVENTS = (
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
)


@app.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
    gateway=Depends(get_gateway),
):
    payload = await request.body()

    try:
        event = stripe.Webhook.construct_event(
            payload,
            stripe_signature,
            config.stripe_webhook_secret()
        )
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    if event["type"] in RECONCILED_EVENTS:
        session = CheckoutSession.from_stripe(event["data"]["object"])
        result = PaymentReconciler(db, gateway).reconcile(session)
        logger.info("Webhook reconciled session %s: %s", session.id, result.message)

    return {"ok": True}
