"""
Payment API routes for the coaching programme
"""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bloom.core.auth import get_current_user_required
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User
from bloom.services.auth_service import AuthService
from bloom.services.email_sender import EmailSender, get_email_sender
from bloom.services.email_templates import payment_confirmation
from bloom.services.payment_service import (PaymentError, PaymentService,
                                            get_payment_service)

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])

PAYMENTS_FROM = "payments@thrivemidlife.com"


class PaymentIntentRequest(BaseModel):
    amount: float = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str


class PaymentSuccessRequest(BaseModel):
    paymentIntentId: str = Field(..., min_length=1)


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest,
    user: User = Depends(get_current_user_required),
    payments: PaymentService = Depends(get_payment_service),
):
    try:
        intent = await payments.create_payment_intent(request.amount, user.id)
    except PaymentError as e:
        logger.error(f"Error creating payment intent: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating payment intent"
        )
    return PaymentIntentResponse(clientSecret=intent["client_secret"])


@router.post("/payment-success")
async def payment_success(
    request: PaymentSuccessRequest,
    user: User = Depends(get_current_user_required),
    db: Session = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
    sender: EmailSender = Depends(get_email_sender),
):
    """Grant coaching access once Stripe reports the intent as succeeded"""
    try:
        intent = await payments.retrieve_payment_intent(request.paymentIntentId)
    except PaymentError as e:
        logger.error(f"Error confirming payment: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error processing payment"
        )

    if intent.get("status") != "succeeded":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment not confirmed")

    AuthService(db).grant_coaching_access(user.id)

    template = payment_confirmation(user.first_name, intent.get("amount", 0) / 100)
    sent = await sender.send(
        to=user.email,
        from_=PAYMENTS_FROM,
        subject=template["subject"],
        text=template["text"],
        html=template["html"],
    )
    if not sent:
        logger.warning("Failed to send payment confirmation email", extra={"user_id": user.id})

    return {"success": True, "message": "Coaching access granted"}
