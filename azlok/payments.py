# azlok/payments.py
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .client import ApiClient, ApiError, ValidationFailed
from .installments import validate_installment_plan
from .models import (
    InstallmentPlan,
    InstallmentPlanCreate,
    Payment,
    PaymentCreate,
    PaymentFilters,
    PaymentMethod,
    PaymentMethodCreate,
    PaymentMethodUpdate,
    PaymentPage,
    PaymentSummary,
    PaymentUpdate,
    Transaction,
    TransactionFilters,
)

logger = logging.getLogger(__name__)

_methods = TypeAdapter(List[PaymentMethod])
_transactions = TypeAdapter(List[Transaction])
_plans = TypeAdapter(List[InstallmentPlan])


def _as_params(filters) -> Dict[str, Any]:
    if filters is None:
        return {}
    if isinstance(filters, dict):
        return {k: v for k, v in filters.items() if v is not None}
    return filters.payload()


class PaymentService:
    """
    Payments, saved payment methods, transactions and installment plans.

    Collection reads fall back to empty results when the API fails; single
    reads and writes raise ApiError so forms can show the server's detail.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    # Payment methods
    def payment_methods(self, active_only: bool = True) -> List[PaymentMethod]:
        try:
            data = self.client.get("/api/payments/methods", params={"active_only": active_only})
            return _methods.validate_python(data or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching payment methods: {e}")
            return []

    def payment_method(self, method_id: int) -> PaymentMethod:
        return PaymentMethod.model_validate(self.client.get(f"/api/payments/methods/{method_id}"))

    def create_payment_method(self, data: Union[PaymentMethodCreate, Dict[str, Any]]) -> PaymentMethod:
        body = data if isinstance(data, PaymentMethodCreate) else PaymentMethodCreate.model_validate(data)
        return PaymentMethod.model_validate(self.client.post("/api/payments/methods", json=body.payload()))

    def update_payment_method(self, method_id: int, data: Union[PaymentMethodUpdate, Dict[str, Any]]) -> PaymentMethod:
        body = data if isinstance(data, PaymentMethodUpdate) else PaymentMethodUpdate.model_validate(data)
        return PaymentMethod.model_validate(self.client.put(f"/api/payments/methods/{method_id}", json=body.payload()))

    def delete_payment_method(self, method_id: int) -> None:
        self.client.delete(f"/api/payments/methods/{method_id}")

    # Payments
    def list_payments(self, filters: Optional[Union[PaymentFilters, Dict[str, Any]]] = None) -> PaymentPage:
        params = _as_params(filters)
        try:
            return PaymentPage.model_validate(self.client.get("/api/payments", params=params))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching payments: {e}")
            return PaymentPage(page=params.get("page", 1), size=params.get("size", 0))

    def get_payment(self, payment_id: int) -> Payment:
        return Payment.model_validate(self.client.get(f"/api/payments/{payment_id}"))

    def create_payment(self, data: Union[PaymentCreate, Dict[str, Any]]) -> Payment:
        body = data if isinstance(data, PaymentCreate) else PaymentCreate.model_validate(data)
        if body.amount <= 0:
            raise ValidationFailed({"amount": "Amount must be a positive number"})
        return Payment.model_validate(self.client.post("/api/payments", json=body.payload()))

    def update_payment(self, payment_id: int, data: Union[PaymentUpdate, Dict[str, Any]]) -> Payment:
        body = data if isinstance(data, PaymentUpdate) else PaymentUpdate.model_validate(data)
        return Payment.model_validate(self.client.put(f"/api/payments/{payment_id}", json=body.payload()))

    def refund(self, payment_id: int, amount: float, reason: Optional[str] = None) -> Payment:
        if amount <= 0:
            raise ValidationFailed({"amount": "Refund amount must be a positive number"})
        data = self.client.post(f"/api/payments/{payment_id}/refund", params={"amount": amount, "reason": reason})
        return Payment.model_validate(data)

    def summary(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> PaymentSummary:
        params = {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        }
        try:
            return PaymentSummary.model_validate(self.client.get("/api/payments/summary", params=params))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching payment summary: {e}")
            return PaymentSummary()

    # Transactions
    def transactions(self, filters: Optional[Union[TransactionFilters, Dict[str, Any]]] = None) -> List[Transaction]:
        try:
            data = self.client.get("/api/payments/transactions", params=_as_params(filters))
            return _transactions.validate_python(data or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching transactions: {e}")
            return []

    def transaction(self, transaction_id: int) -> Transaction:
        return Transaction.model_validate(self.client.get(f"/api/payments/transactions/{transaction_id}"))

    # Installment plans
    def installment_plans(self, status: Optional[str] = None) -> List[InstallmentPlan]:
        try:
            data = self.client.get("/api/payments/installment-plans", params={"status": status})
            return _plans.validate_python(data or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching installment plans: {e}")
            return []

    def installment_plan(self, plan_id: int) -> InstallmentPlan:
        return InstallmentPlan.model_validate(self.client.get(f"/api/payments/installment-plans/{plan_id}"))

    def create_installment_plan(self, data: Union[InstallmentPlanCreate, Dict[str, Any]]) -> InstallmentPlan:
        raw = data.payload() if isinstance(data, InstallmentPlanCreate) else dict(data)
        errors = validate_installment_plan(raw)
        if errors:
            raise ValidationFailed(errors)
        body = InstallmentPlanCreate.model_validate(raw).payload()
        return InstallmentPlan.model_validate(self.client.post("/api/payments/installment-plans", json=body))
