"""Unit tests for HMAC payment signature checks."""

from __future__ import annotations

from app.services.signature_verifier import HmacSignatureVerifier, compute_signature, verify_signature

SECRET = b"whsec_test"
BODY = b'{"event":"payment.captured","payload":{"payment":{"entity":{"id":"pay_1","order_id":"ord_1"}}}}'


def test_valid_signature_verifies() -> None:
    assert verify_signature(BODY, compute_signature(BODY, SECRET), SECRET)


def test_signature_is_case_and_whitespace_tolerant() -> None:
    assert verify_signature(BODY, f" {compute_signature(BODY, SECRET).upper()} ", SECRET)


def test_single_byte_change_in_body_is_rejected() -> None:
    signature = compute_signature(BODY, SECRET)
    tampered = BODY.replace(b"pay_1", b"pay_2")

    assert not verify_signature(tampered, signature, SECRET)


def test_signature_from_other_secret_is_rejected() -> None:
    assert not verify_signature(BODY, compute_signature(BODY, b"other"), SECRET)


def test_missing_signature_or_secret_never_verifies() -> None:
    signature = compute_signature(BODY, SECRET)

    assert not verify_signature(BODY, None, SECRET)
    assert not verify_signature(BODY, "", SECRET)
    assert not verify_signature(BODY, signature, b"")


def test_checkout_signature_covers_order_and_payment() -> None:
    verifier = HmacSignatureVerifier("key_secret", name="checkout")
    signature = compute_signature(b"ord_1|pay_1", b"key_secret")

    assert verifier.verify_checkout("ord_1", "pay_1", signature)
    assert not verifier.verify_checkout("ord_1", "pay_2", signature)
    assert not verifier.verify_checkout("ord_2", "pay_1", signature)
