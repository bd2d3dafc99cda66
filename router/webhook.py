"""Stripe webhook: keeps ``accountType`` and billing fields in sync.

The signature is checked against the raw body before anything is read from
it; a failed check never touches the users collection.
"""
import json
import logging

import stripe
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, Request, status

from dependencies import DB, AppSettings

logger = logging.getLogger(__name__)

router = APIRouter()


def _by_customer(db, customer_id, changes) -> None:
    if not customer_id:
        logger.warning("Stripe event without a customer id")
        return
    result = db.users.update_one({"stripeCustomerId": customer_id}, {"$set": changes})
    if result.matched_count == 0:
        logger.warning("No user for Stripe customer %s", customer_id)


def checkout_completed(db, session) -> None:
    user_id = (session.get("metadata") or {}).get("userId")
    try:
        query = {"_id": ObjectId(user_id)}
    except (InvalidId, TypeError):
        logger.warning("checkout.session.completed without a usable userId: %r", user_id)
        return

    db.users.update_one(query, {"$set": {
        "accountType": (session.get("metadata") or {}).get("accountType", "paid"),
        "stripeCustomerId": session.get("customer"),
        "subscriptionId": session.get("subscription"),
        "subscriptionStatus": "active",
    }})
    logger.info("User %s upgraded via checkout session %s", user_id, session.get("id"))


def invoice_paid(db, invoice) -> None:
    _by_customer(db, invoice.get("customer"), {"paymentStatus": "succeeded", "lastInvoice": invoice.get("id")})


def invoice_failed(db, invoice) -> None:
    _by_customer(db, invoice.get("customer"), {"paymentStatus": "failed", "lastInvoice": invoice.get("id")})


def subscription_updated(db, subscription) -> None:
    _by_customer(db, subscription.get("customer"), {
        "subscriptionStatus": subscription.get("status"),
        "subscriptionId": subscription.get("id"),
    })


def subscription_deleted(db, subscription) -> None:
    _by_customer(db, subscription.get("customer"), {
        "subscriptionStatus": "canceled",
        "subscriptionId": None,
        "accountType": "free",
    })


HANDLERS = {
    "checkout.session.completed": checkout_completed,
    "invoice.payment_succeeded": invoice_paid,
    "invoice.payment_failed": invoice_failed,
    "customer.subscription.updated": subscription_updated,
    "customer.subscription.deleted": subscription_deleted,
}


@router.post("")
async def stripe_webhook(request: Request, db: DB, settings: AppSettings):
    try:
        payload = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Stripe webhook: body is not valid UTF-8")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload.")
    signature = request.headers.get("Stripe-Signature", "")

    try:
        stripe.WebhookSignature.verify_header(payload, signature, settings.stripe_webhook_secret)
    except stripe.SignatureVerificationError:
        logger.warning("Stripe webhook signature verification failed")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature.")

    try:
        event = json.loads(payload)
        event_type = event["type"]
        data_object = event["data"]["object"]
    except (ValueError, KeyError, TypeError):
        logger.warning("Stripe webhook: invalid payload")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload.")

    handler = HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled Stripe event type %s", event_type)
    else:
        handler(db, data_object)
    return {"received": True}
