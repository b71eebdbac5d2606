'''
API endpoints for recording payments and reading ledgers.
'''
from typing import Annotated, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from ..database.db_enums import PaymentStatusEnum
from ..models import finance as finance_models
from ..services.finance_service import LedgerService

class PaymentsAPI:
    """
    A class to encapsulate endpoints for Payments.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/payments",
            tags=["Payments"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_payments,
                methods=["GET"],
                response_model=list[finance_models.PaymentRead])
        self.router.add_api_route(
                "/",
                self.record_payment,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/{payment_id}/status",
                self.update_payment_status,
                methods=["PATCH"],
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/ledger/{student_key}",
                self.get_ledger,
                methods=["GET"],
                response_model=list[finance_models.PaymentRead])

    async def list_payments(
        self,
        ledger_service: Annotated[LedgerService, Depends(LedgerService)],
        payment_status: Annotated[Optional[PaymentStatusEnum], Query(alias="status", description="Optional status filter")] = None
    ) -> list[Any]:
        """
        Retrieves every recorded payment, most recent first.
        """
        return await ledger_service.get_all_payments(status=payment_status)

    async def record_payment(
        self,
        payment_data: finance_models.PaymentCreate,
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        """
        Records a new ledger entry for a student.
        """
        return await ledger_service.record_payment(payment_data.model_dump())

    async def update_payment_status(
        self,
        payment_id: UUID,
        status_update: finance_models.PaymentStatusUpdate,
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        """
        Marks a payment as paid, pending or overdue.
        """
        return await ledger_service.update_payment_status(payment_id, status_update.status.value)

    async def get_ledger(
        self,
        student_key: str,
        ledger_service: Annotated[LedgerService, Depends(LedgerService)],
        limit: Annotated[Optional[int], Query(ge=1, le=500, description="Page size")] = None,
        offset: Annotated[int, Query(ge=0, description="Rows to skip")] = 0
    ) -> list[Any]:
        """
        Retrieves a student's ledger by ID or tenant code, most recent first.
        """
        return await ledger_service.fetch_ledger(student_key, limit=limit, offset=offset)

# Instantiate the class and export its router
payments_api = PaymentsAPI()
router = payments_api.router
