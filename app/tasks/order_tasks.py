import logging

from app.tasks.celery_app import celery_app
from app.database import SessionLocal
from app.models.order import Order

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="send_order_confirmation")
def send_order_confirmation(self, order_id: int) -> dict:
    """
    Send the confirmation for a freshly placed order.

    Enqueued only after the order transaction has committed, so the order
    is always visible here. Delivery is a log line for now; the task retries
    on database errors.

    Args:
        order_id: ID of the committed order

    Returns:
        Dictionary with the confirmation result
    """
    logger.info(f"Sending confirmation for Order #{order_id}")

    db = SessionLocal()

    try:
        order = db.query(Order).filter(Order.id == order_id).first()

        if not order:
            logger.error(f"Order #{order_id} not found")
            return {"status": "failed", "error": "Order not found"}

        recipient = order.user.email if order.user else None
        logger.info(
            f"Order #{order_id} ({order.order_number}) confirmed to {recipient}: "
            f"{len(order.items)} item(s), total {order.total_amount}"
        )

        return {
            "status": "sent",
            "order_id": order_id,
            "order_number": order.order_number,
            "email": recipient,
        }

    except Exception as e:
        logger.error(f"Error confirming Order #{order_id}: {e}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

    finally:
        db.close()
