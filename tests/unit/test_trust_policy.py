"""Tests for the certificate trust override."""
import ssl
import pytest
from unittest.mock import MagicMock, patch

from cryptography import x509
from cryptography.x509.oid import NameOID

from httpsupload.core.exceptions import TrustPolicyError
from httpsupload.core.tls import (
    TrustPolicy,
    TrustDecision,
    IssuerRejectedError,
    build_trust_policy
)

from conftest import build_certificate, issuer


def handshake(client_context, server_context):
    """Run a TLS handshake between two contexts in memory."""
    client_in, client_out = ssl.MemoryBIO(), ssl.MemoryBIO()
    server_in, server_out = ssl.MemoryBIO(), ssl.MemoryBIO()
    client = client_context.wrap_bio(client_in, client_out, server_hostname="localhost")
    server = server_context.wrap_bio(server_in, server_out, server_side=True)

    client_done = server_done = False
    for _ in range(10):
        if not client_done:
            try:
                client.do_handshake()
                client_done = True
            except ssl.SSLWantReadError:
                pass
        if not server_done:
            try:
                server.do_handshake()
                server_done = True
            except ssl.SSLWantReadError:
                pass
        server_in.write(client_out.read())
        client_in.write(server_out.read())
        if client_done and server_done:
            return client
    raise AssertionError("Handshake did not complete")


def mocked_issuer(length, organizations):
    name = MagicMock()
    name.__len__.return_value = length
    name.get_attributes_for_oid.return_value = [MagicMock(value=o) for o in organizations]
    return name


class TestBuildTrustPolicy:
    """Test suite for build_trust_policy."""

    def test_none_trusts_everything(self):
        assert build_trust_policy().trusts_everything is True

    def test_empty_trusts_everything(self):
        assert build_trust_policy([]).trusts_everything is True

    def test_allow_list(self):
        policy = build_trust_policy(["Acme", "Acme", "Example Corp"])

        assert policy.trusts_everything is False
        assert policy.accepted_issuer_organizations == frozenset({"Acme", "Example Corp"})


class TestTrustDecision:
    """Test suite for TrustDecision."""

    def test_accept(self):
        decision = TrustDecision.accept("Acme")

        assert decision.accepted is True
        assert decision.reason == ""
        assert decision.issuer == "Acme"

    def test_reject(self):
        decision = TrustDecision.reject("nope", "Other")

        assert decision.accepted is False
        assert decision.reason == "nope"


class TestEvaluate:
    """Test suite for TrustPolicy.evaluate."""

    @pytest.fixture
    def policy(self):
        return build_trust_policy(["Acme"])

    def test_without_allow_list_accepts_anything(self):
        assert TrustPolicy().evaluate(None).accepted is True

    def test_accepted_issuer(self, policy, acme_certificate):
        decision = policy.evaluate(acme_certificate.der)

        assert decision.accepted is True
        assert decision.issuer == "Acme"

    def test_rejected_issuer(self, policy, other_certificate):
        decision = policy.evaluate(other_certificate.der)

        assert decision.accepted is False
        assert decision.issuer == "Other"
        assert "\"Other\" which is not on the list of accepted issuers" in decision.reason

    def test_no_organization(self, policy, no_org_certificate):
        decision = policy.evaluate(no_org_certificate.der)

        assert decision.accepted is False
        assert "No Organization (O) field" in decision.reason

    def test_any_matching_organization(self, policy, tmp_path):
        attributes = issuer("Other") + [x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Acme")]
        certificate = build_certificate(tmp_path, attributes)

        decision = policy.evaluate(certificate.der)

        assert decision.accepted is True
        assert decision.issuer == "Acme"

    def test_comparison_is_exact(self, tmp_path):
        certificate = build_certificate(tmp_path, issuer("acme"))

        assert build_trust_policy(["Acme"]).evaluate(certificate.der).accepted is False

    @pytest.mark.parametrize("der", [None, b""])
    def test_missing_certificate(self, policy, der):
        decision = policy.evaluate(der)

        assert decision.accepted is False
        assert "No certificate" in decision.reason

    def test_unparsable_certificate(self, policy):
        decision = policy.evaluate(b"not a certificate")

        assert decision.accepted is False
        assert "could not be parsed" in decision.reason

    def test_empty_issuer(self, policy):
        certificate = MagicMock(issuer=mocked_issuer(0, []))

        with patch("cryptography.x509.load_der_x509_certificate", return_value=certificate):
            decision = policy.evaluate(b"der")

        assert decision.accepted is False
        assert "Has no issuer information" in decision.reason

    def test_empty_organization_value(self, policy):
        certificate = MagicMock(issuer=mocked_issuer(1, [""]))

        with patch("cryptography.x509.load_der_x509_certificate", return_value=certificate):
            decision = policy.evaluate(b"der")

        assert decision.accepted is False
        assert "field is empty" in decision.reason


class TestCreateSSLContext:
    """Test suite for TrustPolicy.create_ssl_context."""

    def test_relaxed_settings(self):
        context = build_trust_policy(["Acme"]).create_ssl_context()

        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_fresh_context_per_call(self):
        policy = build_trust_policy()

        assert policy.create_ssl_context() is not policy.create_ssl_context()

    def test_context_error_wrapped(self):
        with patch("ssl.SSLContext", side_effect=ssl.SSLError("no TLS")):
            with pytest.raises(TrustPolicyError, match="Error initializing SSL security context"):
                build_trust_policy().create_ssl_context()

    def test_handshake_with_accepted_issuer(self, acme_certificate):
        context = build_trust_policy(["Acme"]).create_ssl_context()

        client = handshake(context, acme_certificate.server_context())

        assert client.getpeercert(binary_form=True) == acme_certificate.der

    def test_handshake_trusting_everything(self, other_certificate):
        context = build_trust_policy().create_ssl_context()

        handshake(context, other_certificate.server_context())

    def test_handshake_with_rejected_issuer(self, other_certificate):
        context = build_trust_policy(["Acme"]).create_ssl_context()

        with pytest.raises(IssuerRejectedError) as exc_info:
            handshake(context, other_certificate.server_context())

        assert exc_info.value.issuer == "Other"
        assert isinstance(exc_info.value, ssl.CertificateError)

    def test_policy_not_installed_globally(self, other_certificate):
        """Test a relaxed context leaves default contexts untouched."""
        build_trust_policy(["Acme"]).create_ssl_context()
        default = ssl.create_default_context()

        assert default.sslobject_class is ssl.SSLObject
        with pytest.raises(ssl.SSLCertVerificationError):
            handshake(default, other_certificate.server_context())
