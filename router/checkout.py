import logging

import stripe
from fastapi import APIRouter, HTTPException, status

from dependencies import DB, AppSettings, CurrentUser
from models.user import CheckoutRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_stripe(settings) -> None:
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Stripe is not configured.")


@router.post("/create-checkout-session")
def create_checkout_session(body: CheckoutRequest, user: CurrentUser, settings: AppSettings):
    price_id = settings.price_ids.get(body.accountType)
    if not price_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid account type.")
    _require_stripe(settings)

    try:
        session = stripe.checkout.Session.create(
            api_key=settings.stripe_secret_key,
            ui_mode="embedded",
            line_items=[{"price": price_id, "quantity": 1}],
            mode="subscription",
            return_url=f"{settings.client_url}/return?session_id={{CHECKOUT_SESSION_ID}}",
            automatic_tax={"enabled": True},
            customer_email=user["email"],
            metadata={"userId": str(user["_id"]), "accountType": body.accountType},
        )
    except stripe.StripeError as exc:
        logger.exception("Stripe checkout error for user %s", user["_id"])
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Could not create checkout session.") from exc

    return {"clientSecret": session.client_secret}


@router.get("/session-status")
def session_status(session_id: str, user: CurrentUser, settings: AppSettings):
    _require_stripe(settings)
    try:
        session = stripe.checkout.Session.retrieve(session_id, api_key=settings.stripe_secret_key)
    except stripe.StripeError as exc:
        logger.exception("Stripe session lookup failed for %s", session_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Could not retrieve checkout session.") from exc

    customer_email = session.customer_details.email if session.customer_details else None
    return {"status": session.status, "customer_email": customer_email}


@router.post("/cancel-subscription")
def cancel_subscription(user: CurrentUser, db: DB, settings: AppSettings):
    subscription_id = user.get("subscriptionId")
    if not subscription_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No active subscription found.")
    _require_stripe(settings)

    try:
        stripe.Subscription.cancel(subscription_id, api_key=settings.stripe_secret_key)
    except stripe.StripeError as exc:
        logger.exception("Stripe cancellation failed for subscription %s", subscription_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Could not cancel subscription.") from exc

    db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"accountType": "free", "subscriptionStatus": "canceled", "subscriptionId": None}},
    )
    logger.info("Canceled subscription %s for user %s", subscription_id, user["_id"])
    return {"message": "Subscription canceled successfully."}
