'''
API endpoints for finance profiles and finance reports.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from ..models import finance as finance_models
from ..services.finance_service import FinanceProfileService, FinanceReportService
from ..common.exceptions import NotFoundError
from ..common.logger import log

class FinanceAPI:
    """
    A class to encapsulate endpoints for finance profiles and reports.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/api/finance",
            tags=["Finance"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/profile/{student_key}",
                self.get_finance_profile,
                methods=["GET"],
                response_model=finance_models.StudentFinanceProfile)
        self.router.add_api_route(
                "/reports/{student_key}",
                self.generate_report,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.FinanceReportCreated)
        self.router.add_api_route(
                "/reports/{report_id}",
                self.get_report,
                methods=["GET"],
                response_model=finance_models.FinanceReportRead)
        self.router.add_api_route(
                "/reports/{report_id}/download",
                self.download_report,
                methods=["GET"],
                response_model=None)
        self.router.add_api_route(
                "/user-reports/{user_id}",
                self.list_user_reports,
                methods=["GET"],
                response_model=None)

    async def get_finance_profile(
        self,
        student_key: str,
        profile_service: Annotated[FinanceProfileService, Depends(FinanceProfileService)]
    ) -> Any:
        """
        Returns the student's identity, payment history, outstanding
        balance and next due date. student_key is an ID or a tenant code.
        """
        return await profile_service.compose_profile(student_key)

    async def generate_report(
        self,
        student_key: str,
        report_request: finance_models.FinanceReportCreate,
        profile_service: Annotated[FinanceProfileService, Depends(FinanceProfileService)],
        report_service: Annotated[FinanceReportService, Depends(FinanceReportService)]
    ) -> Any:
        """
        Archives a finance report. Without a snapshot in the body the
        current profile is composed and archived.
        """
        snapshot = report_request.snapshot
        if snapshot is None:
            snapshot = await profile_service.compose_profile(student_key)

        report_id = await report_service.generate_report(
            student_key,
            snapshot,
            include_pdf=report_request.include_pdf
        )
        return finance_models.FinanceReportCreated(report_id=report_id)

    async def get_report(
        self,
        report_id: str,
        report_service: Annotated[FinanceReportService, Depends(FinanceReportService)]
    ) -> Any:
        """Retrieves a single report's metadata and snapshot."""
        return await report_service.get_report(report_id)

    async def download_report(
        self,
        report_id: str,
        report_service: Annotated[FinanceReportService, Depends(FinanceReportService)]
    ) -> Response:
        """
        Streams a report's stored document as an attachment.
        """
        try:
            payload = await report_service.download_report_payload(report_id)
        except NotFoundError:
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"error": "Report not found"}
            )
        except Exception as e:
            log.error(f"Error downloading report {report_id}: {e}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to download report"}
            )

        return Response(
            content=payload.content,
            media_type=payload.content_type,
            headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'}
        )

    async def list_user_reports(
        self,
        user_id: str,
        report_service: Annotated[FinanceReportService, Depends(FinanceReportService)]
    ) -> Response:
        """
        Lists a student's reports, newest first, as {"reports": [...]}.
        """
        try:
            reports = await report_service.get_reports_for_student(user_id)
        except Exception as e:
            log.error(f"Error fetching reports for user {user_id}: {e}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to fetch reports"}
            )

        body = finance_models.FinanceReportList(reports=reports)
        return JSONResponse(content=body.model_dump(mode="json"))

# Instantiate the class and export its router
finance_api = FinanceAPI()
router = finance_api.router
