"""
Midtrans payment gateway adapter
Snap sessions for checkout, Core API for notifications and status checks
"""
import logging
from typing import Any, Dict, List, Optional

import midtransclient

from elearning.config import settings

logger = logging.getLogger(__name__)


class PaymentService:
    """Stateless wrapper around the Midtrans SDK"""

    def __init__(
        self,
        server_key: Optional[str],
        client_key: Optional[str],
        client_url: str,
        is_production: bool = False
    ):
        self.server_key = server_key
        self.client_key = client_key
        self.client_url = client_url.rstrip("/")
        self.is_production = is_production

    def _snap(self) -> midtransclient.Snap:
        return midtransclient.Snap(
            is_production=self.is_production,
            server_key=self.server_key,
            client_key=self.client_key
        )

    def _core(self) -> midtransclient.CoreApi:
        return midtransclient.CoreApi(
            is_production=self.is_production,
            server_key=self.server_key,
            client_key=self.client_key
        )

    def _callback_url(self, status: str, order_id: str) -> str:
        return f"{self.client_url}/payment?status={status}&orderId={order_id}"

    def create_session(
        self,
        order_id: str,
        amount: int,
        name: str,
        email: str,
        items: List[Dict[str, Any]]
    ) -> Dict[str, str]:
        """
        Create a Snap payment session

        Returns:
            Dict with token and redirect_url
        """
        parameter = {
            "transaction_details": {
                "order_id": order_id,
                "gross_amount": amount,
            },
            "credit_card": {"secure": True},
            "customer_details": {
                "first_name": name,
                "email": email,
            },
            "item_details": items,
            "callbacks": {
                "finish": self._callback_url("success", order_id),
                "error": self._callback_url("error", order_id),
                "pending": self._callback_url("pending", order_id),
            },
        }

        try:
            transaction = self._snap().create_transaction(parameter)
        except Exception as e:
            logger.error(f"Error creating Midtrans transaction: {str(e)}")
            raise

        logger.info(f"Midtrans transaction created: {order_id}")
        return {
            "token": transaction["token"],
            "redirect_url": transaction["redirect_url"],
        }

    def verify_notification(self, payload: Dict[str, Any]) -> Dict[str, Optional[str]]:
        """
        Verify a webhook payload by re-fetching its status from Midtrans

        Returns:
            Dict with order_id, transaction_status and fraud_status
        """
        try:
            status = self._core().transactions.notification(payload)
        except Exception as e:
            logger.error(f"Error verifying notification: {str(e)}")
            raise

        return {
            "order_id": status.get("order_id"),
            "transaction_status": status.get("transaction_status"),
            "fraud_status": status.get("fraud_status"),
        }

    def check_transaction_status(self, order_id: str) -> Dict[str, Any]:
        """Fetch the raw transaction status for a gateway order id"""
        try:
            return self._core().transactions.status(order_id)
        except Exception as e:
            logger.error(f"Error checking transaction status: {str(e)}")
            raise


def resolve_payment_status(transaction_status: Optional[str], fraud_status: Optional[str]) -> Optional[str]:
    """Map a Midtrans transaction/fraud status pair onto an order payment status"""
    if transaction_status == "capture":
        if fraud_status == "challenge":
            return "challenge"
        if fraud_status == "accept":
            return "success"
        return None
    if transaction_status == "settlement":
        return "success"
    if transaction_status in ("cancel", "deny", "expire"):
        return "failure"
    if transaction_status == "pending":
        return "pending"
    return None


# Global instance
payment_service = PaymentService(
    server_key=settings.MIDTRANS_SERVER_KEY,
    client_key=settings.MIDTRANS_CLIENT_KEY,
    client_url=settings.CLIENT_URL,
    is_production=settings.MIDTRANS_IS_PRODUCTION
)


def get_payment_service() -> PaymentService:
    """FastAPI dependency returning the shared payment adapter"""
    return payment_service
