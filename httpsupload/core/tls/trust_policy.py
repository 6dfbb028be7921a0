"""
Certificate trust override.

Replaces the default TLS validation for a single request when certificate
validation has been switched off. The resulting SSL context accepts any
certificate chain and any hostname, and can optionally require that the
server's leaf certificate was issued by an Organization on an allow-list.

The policy is bound to the SSL context it creates, never to the process, so
a relaxed request cannot affect other connections.
"""
import ssl
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID

from ..exceptions import TrustPolicyError
from ..logging import get_logger

logger = get_logger('httpsupload.ssl')


class IssuerRejectedError(ssl.SSLCertVerificationError):
    """
    Raised from inside the TLS handshake when the trust policy rejects the
    server certificate. Being an ssl.CertificateError, it aborts the
    handshake the same way a failed platform validation would.
    """
    
    def __init__(self, message: str, issuer: Optional[str] = None) -> None:
        super().__init__(message)
        self.issuer = issuer


@dataclass(frozen=True)
class TrustDecision:
    """
    Outcome of checking a server certificate against a trust policy.
    
    Attributes:
        accepted: True if the certificate is trusted
        reason: Why the certificate was rejected (empty when accepted)
        issuer: Issuer Organization found on the certificate (if any)
    """
    accepted: bool
    reason: str = ''
    issuer: Optional[str] = None
    
    @classmethod
    def accept(cls, issuer: Optional[str] = None) -> 'TrustDecision':
        return cls(accepted=True, issuer=issuer)
    
    @classmethod
    def reject(cls, reason: str, issuer: Optional[str] = None) -> 'TrustDecision':
        return cls(accepted=False, reason=reason, issuer=issuer)


@dataclass(frozen=True)
class TrustPolicy:
    """
    Relaxed server certificate validation.
    
    With an empty allow-list every certificate is trusted. Otherwise the
    leaf certificate's Issuer must carry an Organization (O) attribute whose
    value is on the list.
    
    Example:
        >>> policy = build_trust_policy(["Acme"])
        >>> context = policy.create_ssl_context()
        >>> async with session.post(url, data=body, ssl=context) as response:
        ...     ...
    """
    accepted_issuer_organizations: FrozenSet[str] = frozenset()
    
    @property
    def trusts_everything(self) -> bool:
        """Returns True if no issuer allow-list is in effect."""
        return not self.accepted_issuer_organizations
    
    def evaluate(self, der_certificate: Optional[bytes]) -> TrustDecision:
        """
        Check the server's leaf certificate.
        
        Args:
            der_certificate: DER encoded leaf certificate presented by the server
            
        Returns:
            TrustDecision describing whether the certificate is trusted
        """
        if self.trusts_everything:
            return TrustDecision.accept()
        
        if not der_certificate:
            return TrustDecision.reject(
                "Certificate at endpoint can't be trusted. "
                "No certificate was presented by the server."
            )
        
        try:
            certificate = x509.load_der_x509_certificate(der_certificate)
            issuer = certificate.issuer
        except ValueError as e:
            return TrustDecision.reject(
                f"Certificate at endpoint can't be trusted. "
                f"It could not be parsed: {e}"
            )
        
        if len(issuer) == 0:
            return TrustDecision.reject(
                "Certificate at endpoint can't be trusted. Has no issuer information. "
                "Cannot validate against list of accepted issuers."
            )
        
        organizations = issuer.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)
        if not organizations:
            return TrustDecision.reject(
                "No Organization (O) field found in the issuer section of server's "
                "certificate. Cannot validate against list of accepted issuers."
            )
        
        server_issuer = None
        for attribute in organizations:
            server_issuer = attribute.value
            if not server_issuer:
                return TrustDecision.reject(
                    "Certificate's Issuer Organization (O) field is empty. "
                    "Cannot validate against list of accepted issuers."
                )
            if server_issuer in self.accepted_issuer_organizations:
                return TrustDecision.accept(server_issuer)
        
        return TrustDecision.reject(
            f"Certificate at endpoint can't be trusted. It is issued by "
            f"\"{server_issuer}\" which is not on the list of accepted issuers.",
            issuer=server_issuer
        )
    
    def create_ssl_context(self) -> ssl.SSLContext:
        """
        Build an SSL context enforcing this policy.
        
        Chain and hostname validation are disabled. Client certificates are
        never requested. When an allow-list is set, the peer certificate is
        evaluated as soon as the handshake completes and the handshake is
        aborted with IssuerRejectedError if it is not trusted.
        
        Returns:
            A new SSL context, not shared with any other request
            
        Raises:
            TrustPolicyError: If the SSL context cannot be created
        """
        try:
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        except (ssl.SSLError, ValueError) as e:
            logger.error(f"Error initializing SSL security context: {e}")
            raise TrustPolicyError(f"Error initializing SSL security context: {e}") from e
        
        context.sslobject_class = type(
            'PolicySSLObject',
            (_PolicySSLObject,),
            {'trust_policy': self}
        )
        
        if self.trusts_everything:
            logger.debug("SSL context created: trusting all certificates and hostnames")
        else:
            logger.debug(
                f"SSL context created: accepted issuers "
                f"{sorted(self.accepted_issuer_organizations)}"
            )
        return context


class _PolicySSLObject(ssl.SSLObject):
    """SSLObject that consults a TrustPolicy once the handshake is done."""
    
    trust_policy: TrustPolicy
    
    def do_handshake(self) -> None:
        # Raises SSLWantReadError until the handshake has finished
        super().do_handshake()
        
        decision = self.trust_policy.evaluate(self.getpeercert(binary_form=True))
        if not decision.accepted:
            logger.warning(f"Server certificate rejected: {decision.reason}")
            raise IssuerRejectedError(decision.reason, decision.issuer)


def build_trust_policy(
    accepted_issuer_organizations: Optional[Iterable[str]] = None
) -> TrustPolicy:
    """
    Create a trust policy.
    
    Args:
        accepted_issuer_organizations: Issuer Organization names to accept.
            None or empty trusts every certificate.
            
    Returns:
        TrustPolicy instance
    """
    return TrustPolicy(frozenset(accepted_issuer_organizations or ()))
