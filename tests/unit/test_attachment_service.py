from __future__ import annotations

import pytest

from case_messaging.application.exceptions import NotFoundError, ValidationError
from case_messaging.domain.entities.message import Attachment
from case_messaging.domain.value_objects.enums import Role
from case_messaging.infrastructure.storage.local_store import LocalAttachmentStore
from case_messaging.services import attachment_service
from tests.conftest import OTHER_CLIENT, FakeAttachmentStore, make_message, principal_for

CONTRACT = Attachment(
    filename="case-2024-001/contract.pdf",
    original_name="Contract.pdf",
    size=2048,
    mimetype="application/pdf",
)
INVOICE = Attachment(
    filename="case-2024-001/invoice.pdf",
    original_name="Invoice.pdf",
    size=512,
    mimetype="application/pdf",
)


@pytest.fixture
def store(tmp_path) -> FakeAttachmentStore:
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4")
    return FakeAttachmentStore(files={INVOICE.filename: path})


@pytest.mark.asyncio
async def test_resolves_attachment_by_index(uow, admin_principal, store):
    msg = make_message(attachments=(CONTRACT, INVOICE))
    uow.seed(msg)

    attachment, path = await attachment_service.get_attachment(msg.id, 1, admin_principal, uow, store)

    assert attachment == INVOICE
    assert path.read_bytes() == b"%PDF-1.4"


@pytest.mark.asyncio
@pytest.mark.parametrize("index", [2, 5])
async def test_index_out_of_range(uow, admin_principal, store, index):
    msg = make_message(attachments=(CONTRACT, INVOICE))
    uow.seed(msg)

    with pytest.raises(ValidationError):
        await attachment_service.get_attachment(msg.id, index, admin_principal, uow, store)


@pytest.mark.asyncio
async def test_message_without_attachments(uow, admin_principal, store):
    msg = make_message()
    uow.seed(msg)

    with pytest.raises(NotFoundError):
        await attachment_service.get_attachment(msg.id, 0, admin_principal, uow, store)


@pytest.mark.asyncio
async def test_uninvolved_user_cannot_download(uow, store):
    msg = make_message(attachments=(INVOICE,))
    uow.seed(msg)
    outsider = principal_for(OTHER_CLIENT, Role.CLIENT)

    with pytest.raises(NotFoundError):
        await attachment_service.get_attachment(msg.id, 0, outsider, uow, store)


@pytest.mark.asyncio
async def test_file_missing_from_storage(uow, admin_principal, store):
    msg = make_message(attachments=(CONTRACT,))
    uow.seed(msg)

    with pytest.raises(NotFoundError):
        await attachment_service.get_attachment(msg.id, 0, admin_principal, uow, store)


@pytest.mark.asyncio
async def test_local_store_locates_files_under_root(tmp_path):
    root = tmp_path / "attachments"
    (root / "case-2024-001").mkdir(parents=True)
    (root / "case-2024-001" / "contract.pdf").write_bytes(b"data")
    (tmp_path / "secret.txt").write_text("nope")
    store = LocalAttachmentStore(root)

    found = await store.locate("case-2024-001/contract.pdf")

    assert found == (root / "case-2024-001" / "contract.pdf").resolve()
    assert await store.locate("case-2024-001/missing.pdf") is None
    assert await store.locate("../secret.txt") is None
    assert await store.locate("case-2024-001") is None
