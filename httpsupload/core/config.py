"""
Uploader configuration module.

Holds everything the transport needs: endpoint, credentials, proxy,
timeouts, certificate validation and extra request headers.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Sequence
import ssl
from ssl import SSLContext

import aiohttp

from .exceptions import TrustPolicyError
from .logging import get_logger
from .tls import build_trust_policy

logger = get_logger('httpsupload.upload')

# Headers set by the uploader itself. Callers cannot override them.
RESTRICTED_HTTP_HEADERS = (
    'Connection',
    'Cache-Control',
    'Content-Type',
    'Content-Length',
    'Authorization',
)


def is_restricted_header(name: str) -> bool:
    """Returns True if the header name is reserved (case-insensitive)."""
    return name.lower() in {h.lower() for h in RESTRICTED_HTTP_HEADERS}


@dataclass
class ProxyConfig:
    """
    HTTP proxy configuration.
    
    The proxy is passed per request and never installed process-wide.
    """
    host: str
    port: int = 8080
    
    def to_aiohttp_proxy(self) -> str:
        """Convert to aiohttp proxy URL."""
        return f"http://{self.host}:{self.port}"


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.
    
    With verify=False the platform validation is replaced by a trust policy
    that accepts any certificate and hostname, optionally restricted to
    certificates whose Issuer Organization is in accepted_issuers.
    """
    verify: bool = True
    accepted_issuers: Optional[Sequence[str]] = None
    ca_file: Optional[str] = None
    
    def create_ssl_context(self) -> SSLContext:
        """Create a fresh SSL context from configuration."""
        if not self.verify:
            return build_trust_policy(self.accepted_issuers).create_ssl_context()
        
        try:
            return ssl.create_default_context(cafile=self.ca_file)
        except OSError as e:
            logger.error(f"Error initializing SSL security context: {e}")
            raise TrustPolicyError(f"Error initializing SSL security context: {e}") from e


@dataclass
class TimeoutConfig:
    """
    Timeout configuration in seconds.
    
    Defaults match a 10 s connect and 5 s read timeout.
    """
    connect: float = 10.0
    read: float = 5.0
    
    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        """Convert to aiohttp ClientTimeout. No total limit: uploads may be long."""
        return aiohttp.ClientTimeout(
            total=None,
            connect=self.connect,
            sock_read=self.read
        )


@dataclass
class UploaderConfig:
    """
    Complete uploader configuration.
    
    Example:
        >>> config = UploaderConfig(
        ...     url="https://example.com/upload",
        ...     username="john",
        ...     password="secret",
        ...     ssl=SSLConfig(verify=False, accepted_issuers=["Acme"]),
        ...     proxy=ProxyConfig("proxy.local", 3128),
        ... )
    """
    url: str
    
    # Basic authentication
    username: Optional[str] = None
    password: Optional[str] = None
    
    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    # Additional headers (reserved names are dropped)
    additional_headers: Dict[str, str] = field(default_factory=dict)
    
    def __post_init__(self):
        """Drop reserved headers from additional_headers."""
        filtered = {}
        for name, value in (self.additional_headers or {}).items():
            if is_restricted_header(name):
                logger.debug(f"Ignoring reserved header in additional headers: {name}")
                continue
            filtered[name] = value
        self.additional_headers = filtered
    
    @classmethod
    def insecure(
        cls,
        url: str,
        accepted_issuers: Optional[Sequence[str]] = None,
        **kwargs
    ) -> 'UploaderConfig':
        """Create configuration with certificate validation disabled."""
        return cls(
            url=url,
            ssl=SSLConfig(verify=False, accepted_issuers=accepted_issuers),
            **kwargs
        )
    
    @classmethod
    def with_proxy(cls, url: str, host: str, port: int = 8080, **kwargs) -> 'UploaderConfig':
        """Create configuration with an HTTP proxy."""
        return cls(
            url=url,
            proxy=ProxyConfig(host=host, port=port),
            **kwargs
        )
    
    @property
    def uses_proxy(self) -> bool:
        return self.proxy is not None
    
    @property
    def requires_authentication(self) -> bool:
        return self.username is not None
    
    @property
    def is_https(self) -> bool:
        return self.url.lower().startswith('https://')
    
    def build_headers(self, boundary: str) -> Dict[str, str]:
        """
        Build the request headers for a multipart upload.
        
        Content-Length is not included; the transmitter adds it when the
        body size is known.
        
        Args:
            boundary: Multipart boundary token
            
        Returns:
            Header dict
        """
        headers = {
            'Connection': 'Keep-Alive',
            'Cache-Control': 'no-cache',
            'Content-Type': f'multipart/form-data;boundary={boundary}',
        }
        headers.update(self.additional_headers)
        
        if self.requires_authentication:
            headers['Authorization'] = build_basic_auth(self.username, self.password)
        
        return headers
    
    def create_ssl_context(self) -> Optional[SSLContext]:
        """
        Create the SSL context for one request.
        
        Returns None for plain HTTP endpoints.
        """
        if not self.is_https:
            return None
        return self.ssl.create_ssl_context()
    
    def get_request_kwargs(self) -> Dict[str, object]:
        """Get per-request kwargs for aiohttp ClientSession.post."""
        kwargs: Dict[str, object] = {}
        if self.proxy is not None:
            kwargs['proxy'] = self.proxy.to_aiohttp_proxy()
        return kwargs


def build_basic_auth(username: str, password: Optional[str]) -> str:
    """Build a Basic Authorization header value."""
    return aiohttp.encode_basic_auth(username, password or '')
