"""Tests for TransactionSubmitter."""

import base64

import httpx
import pytest

from fordefi_signer.api.base import HttpError, ValidationError
from fordefi_signer.api.transactions import TransactionOptions, TransactionSubmitter
from fordefi_signer.contracts.transactions import Mode, TransactionState, TransactionType

from conftest import job_payload, request_json

TX_BYTES = b"\x01\x02\x03solana-message"
SIGNATURE_B64 = base64.b64encode(bytes(range(64))).decode()
CREATE_PATH = "/v1/transactions/create-and-wait"


class TestCreateAndWait:
    """Tests for create_and_wait_transaction()."""

    @pytest.mark.asyncio
    async def test_minimal_payload(self, submitter, fake_fordefi):
        """Unset optional fields are omitted from the body."""
        fake_fordefi.route("POST", CREATE_PATH, job_payload(signatures=[{"signature": SIGNATURE_B64}]))

        await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

        (request,) = fake_fordefi.calls("POST", CREATE_PATH)
        assert request_json(request) == {
            "type": "solana_transaction",
            "vault_id": "vault-1",
            "chain": "solana_mainnet",
            "transaction": base64.b64encode(TX_BYTES).decode(),
        }

    @pytest.mark.asyncio
    async def test_full_payload(self, submitter, fake_fordefi):
        fake_fordefi.route("POST", CREATE_PATH, job_payload(signatures=[{"signature": SIGNATURE_B64}]))
        options = TransactionOptions(
            note="mint tokens",
            idempotence_id="abc-0",
            sign_mode=Mode.AUTO,
            push_mode=Mode.MANUAL,
            timeout=30000,
        )

        await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_devnet", options)

        body = request_json(fake_fordefi.calls("POST", CREATE_PATH)[0])
        assert body["idempotence_id"] == "abc-0"
        assert body["note"] == "mint tokens"
        assert body["sign_mode"] == "auto"
        assert body["push_mode"] == "manual"
        assert body["timeout"] == 30000
        assert body["chain"] == "solana_devnet"

    @pytest.mark.asyncio
    async def test_empty_idempotence_id_and_zero_timeout_omitted(self, submitter, fake_fordefi):
        """Empty idempotence id and zero timeout count as unset."""
        fake_fordefi.route("POST", CREATE_PATH, job_payload(signatures=[{"signature": SIGNATURE_B64}]))

        await submitter.create_and_wait_transaction(
            "vault-1",
            TX_BYTES,
            "solana_mainnet",
            TransactionOptions(idempotence_id="", timeout=0),
        )

        body = request_json(fake_fordefi.calls("POST", CREATE_PATH)[0])
        assert "idempotence_id" not in body
        assert "timeout" not in body

    @pytest.mark.asyncio
    async def test_returns_terminal_job(self, submitter, fake_fordefi):
        fake_fordefi.route(
            "POST",
            CREATE_PATH,
            job_payload(
                state="completed",
                signatures=[{"signature": SIGNATURE_B64, "public_key": "pk"}],
                transaction_hash="hash",
                unexpected_field=True,
            ),
        )

        job = await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

        assert job.state == TransactionState.COMPLETED
        assert job.state in {TransactionState.COMPLETED, TransactionState.FAILED, TransactionState.ABORTED}
        assert job.is_terminal
        assert job.type == TransactionType.SOLANA_TRANSACTION
        assert job.chain.unique_id == "solana_mainnet"
        assert job.transaction_hash == "hash"
        assert job.signatures[0].public_key == "pk"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", ["failed", "aborted"])
    async def test_failed_and_aborted_are_returned(self, submitter, fake_fordefi, state):
        fake_fordefi.route("POST", CREATE_PATH, job_payload(state=state))

        job = await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

        assert job.state.value == state
        assert job.signatures == []

    @pytest.mark.asyncio
    async def test_null_signatures(self, submitter, fake_fordefi):
        payload = job_payload()
        payload["signatures"] = None
        fake_fordefi.route("POST", CREATE_PATH, payload)

        job = await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

        assert job.signatures == []

    @pytest.mark.asyncio
    async def test_non_terminal_state_rejected(self, submitter, fake_fordefi):
        """The endpoint must only return terminal jobs."""
        fake_fordefi.route("POST", CREATE_PATH, job_payload(state="waiting_for_approval"))

        with pytest.raises(ValidationError):
            await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

    @pytest.mark.asyncio
    async def test_malformed_job_rejected(self, submitter, fake_fordefi):
        fake_fordefi.route("POST", CREATE_PATH, {"id": "tx-1", "state": "teleported"})

        with pytest.raises(ValidationError):
            await submitter.create_and_wait_transaction("vault-1", TX_BYTES, "solana_mainnet")

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, submitter, fake_fordefi):
        fake_fordefi.route("POST", CREATE_PATH, httpx.Response(400, json={"error": "invalid vault"}))

        with pytest.raises(HttpError) as exc_info:
            await submitter.create_and_wait_transaction("bad-vault", TX_BYTES, "solana_mainnet")

        assert exc_info.value.status == 400

    def test_local_timeout(self, submitter):
        """Server wait plus margin, or the configured default."""
        assert submitter._local_timeout(TransactionOptions(timeout=30000)) == 35.0
        assert submitter._local_timeout(TransactionOptions()) == 60.0


class TestBatchOptions:
    """Tests for per-member idempotence ids."""

    def test_member_suffix(self):
        options = TransactionOptions(idempotence_id="base", note="n")

        assert options.for_batch_member(0).idempotence_id == "base-0"
        assert options.for_batch_member(3).idempotence_id == "base-3"
        assert options.for_batch_member(3).note == "n"
        assert options.idempotence_id == "base"

    def test_no_base_id(self):
        options = TransactionOptions()

        assert options.for_batch_member(1).idempotence_id is None

    def test_empty_base_id(self):
        """An empty base id gives members no idempotence id."""
        options = TransactionOptions(idempotence_id="")

        assert options.for_batch_member(0).idempotence_id is None
        assert options.for_batch_member(1).idempotence_id is None


class TestSignTransaction:
    """Tests for sign_transaction()."""

    @pytest.mark.asyncio
    async def test_returns_decoded_bytes(self, submitter, fake_fordefi):
        signed = b"signed-transaction-bytes"
        fake_fordefi.route(
            "POST",
            "/v1/transactions/sign",
            {"signedTransaction": base64.b64encode(signed).decode()},
        )

        assert await submitter.sign_transaction(TX_BYTES) == signed

        body = request_json(fake_fordefi.calls("POST", "/v1/transactions/sign")[0])
        assert body == {"transaction": base64.b64encode(TX_BYTES).decode(), "network": "solana"}

    @pytest.mark.asyncio
    async def test_missing_signed_transaction(self, submitter, fake_fordefi):
        fake_fordefi.route("POST", "/v1/transactions/sign", {})

        with pytest.raises(ValidationError):
            await submitter.sign_transaction(TX_BYTES)

    @pytest.mark.asyncio
    async def test_invalid_base64(self, submitter, fake_fordefi):
        fake_fordefi.route("POST", "/v1/transactions/sign", {"signedTransaction": "not base64!!"})

        with pytest.raises(ValidationError):
            await submitter.sign_transaction(TX_BYTES)


class TestReadCalls:
    """Tests for wallet address and status lookups."""

    @pytest.mark.asyncio
    async def test_get_wallet_address(self, submitter, fake_fordefi):
        fake_fordefi.route("GET", "/v1/wallets/solana", {"address": "So1anaAddress"})

        assert await submitter.get_wallet_address() == "So1anaAddress"

    @pytest.mark.asyncio
    async def test_get_transaction_status(self, submitter, fake_fordefi):
        fake_fordefi.route("GET", "/v1/transactions/tx-42", {"status": "completed"})

        assert await submitter.get_transaction_status("tx-42") == "completed"

    @pytest.mark.asyncio
    async def test_missing_field(self, submitter, fake_fordefi):
        fake_fordefi.route("GET", "/v1/wallets/solana", {})

        with pytest.raises(ValidationError):
            await submitter.get_wallet_address()

    @pytest.mark.asyncio
    async def test_not_found(self, submitter, fake_fordefi):
        with pytest.raises(HttpError) as exc_info:
            await submitter.get_transaction_status("missing")

        assert exc_info.value.status == 404


class TestFromSettings:

    def test_uses_settings_timeouts(self):
        from fordefi_signer.config import Settings

        settings = Settings(
            fordefi_api_key="k",
            fordefi_api_secret="s",
            create_and_wait_timeout=90.0,
            wait_timeout_margin=3.0,
        )

        submitter = TransactionSubmitter.from_settings(settings)

        assert submitter.create_and_wait_timeout == 90.0
        assert submitter.wait_timeout_margin == 3.0
