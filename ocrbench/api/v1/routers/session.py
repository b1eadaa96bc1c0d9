"""Session endpoints: credential entry, sign-out and progress polling."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from ocrbench.api.schemas import CredentialRequestSchema, ProgressSchema, SessionStatusSchema
from ocrbench.api.v1.dependencies import get_session
from ocrbench.application.session import WorkbenchSession
from ocrbench.domain.exceptions import PreconditionError
from ocrbench.infrastructure.vision.credentials import ApiKeyCredentialProvider

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionStatusSchema)
def get_session_status(session: WorkbenchSession = Depends(get_session)) -> SessionStatusSchema:
    document = session.document
    return SessionStatusSchema(
        hasCredential=session.credentials.has_credential(),
        credentialMode=session.settings.credential_mode,
        documentLoaded=document is not None,
        fileName=document.file_name if document is not None else None,
    )


@router.post("/credential", response_model=SessionStatusSchema)
def set_credential(
    payload: CredentialRequestSchema,
    session: WorkbenchSession = Depends(get_session),
) -> SessionStatusSchema:
    provider = session.credentials
    if not isinstance(provider, ApiKeyCredentialProvider):
        raise PreconditionError("This workbench uses a host-managed credential.")
    provider.set_key(payload.apiKey)
    session.reset_client()
    return get_session_status(session)


@router.delete("", status_code=204)
def sign_out(session: WorkbenchSession = Depends(get_session)) -> Response:
    session.sign_out()
    return Response(status_code=204)


@router.get("/progress", response_model=ProgressSchema)
def get_progress(session: WorkbenchSession = Depends(get_session)) -> ProgressSchema:
    snapshot = session.progress
    return ProgressSchema(percent=snapshot.percent, status=snapshot.status, failed=snapshot.failed)
