"""FastAPI dependency injection helpers."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from case_messaging.application.dto.principal import Principal
from case_messaging.application.ports.attachments import AttachmentStore
from case_messaging.application.ports.auth import TokenVerifier
from case_messaging.application.ports.sms import SmsDispatcher
from case_messaging.config import settings
from case_messaging.infrastructure.auth.verifiers import HS256Verifier, JWKSVerifier
from case_messaging.infrastructure.db.session import AsyncSessionLocal
from case_messaging.infrastructure.db.uow import SqlAlchemyUoW
from case_messaging.infrastructure.storage.local_store import LocalAttachmentStore

_bearer_scheme = HTTPBearer(description="Token issued by the office identity service")


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


@lru_cache(maxsize=1)
def get_verifier() -> TokenVerifier:
    claims = {"audience": settings.JWT_AUDIENCE, "issuer": settings.JWT_ISSUER}
    if settings.JWT_VERIFY_MODE == "jwks":
        if not settings.JWKS_URL:
            raise RuntimeError("JWKS_URL must be set when JWT_VERIFY_MODE=jwks")
        return JWKSVerifier(settings.JWKS_URL, **claims)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM, **claims)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {exc}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_sms_dispatcher(request: Request) -> SmsDispatcher | None:
    """The gateway started by the app lifespan, or None outside of it."""
    return getattr(request.app.state, "sms", None)


SmsDep = Annotated[SmsDispatcher | None, Depends(get_sms_dispatcher)]


def get_notify_observers() -> bool:
    return settings.NOTIFY_STAFF_OBSERVERS


NotifyObserversDep = Annotated[bool, Depends(get_notify_observers)]


def get_trash_retention_days() -> int:
    return settings.TRASH_RETENTION_DAYS


RetentionDaysDep = Annotated[int, Depends(get_trash_retention_days)]


@lru_cache(maxsize=1)
def get_attachment_store() -> AttachmentStore:
    return LocalAttachmentStore(settings.ATTACHMENTS_DIR)


AttachmentStoreDep = Annotated[AttachmentStore, Depends(get_attachment_store)]
