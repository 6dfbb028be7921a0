"""Tests for uploader configuration."""
import ssl
import warnings
import pytest
from unittest.mock import patch

import aiohttp

from httpsupload.core.config import (
    UploaderConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    is_restricted_header,
    build_basic_auth
)
from httpsupload.core.exceptions import TrustPolicyError


class TestRestrictedHeaders:
    """Test suite for reserved header names."""

    @pytest.mark.parametrize("name", [
        "Connection", "cache-control", "CONTENT-TYPE", "Content-Length", "authorization"
    ])
    def test_restricted(self, name):
        assert is_restricted_header(name) is True

    def test_not_restricted(self):
        assert is_restricted_header("X-Request-Id") is False


class TestProxyConfig:
    """Test suite for ProxyConfig."""

    def test_default_port(self):
        assert ProxyConfig("proxy.local").port == 8080

    def test_to_aiohttp_proxy(self):
        assert ProxyConfig("proxy.local", 3128).to_aiohttp_proxy() == "http://proxy.local:3128"


class TestTimeoutConfig:
    """Test suite for TimeoutConfig."""

    def test_defaults(self):
        timeout = TimeoutConfig().to_aiohttp_timeout()

        assert isinstance(timeout, aiohttp.ClientTimeout)
        assert timeout.total is None
        assert timeout.connect == 10.0
        assert timeout.sock_read == 5.0

    def test_custom(self):
        timeout = TimeoutConfig(connect=1.5, read=30).to_aiohttp_timeout()

        assert timeout.connect == 1.5
        assert timeout.sock_read == 30


class TestSSLConfig:
    """Test suite for SSLConfig."""

    def test_verifying_context(self):
        context = SSLConfig().create_ssl_context()

        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True

    def test_relaxed_context(self):
        context = SSLConfig(verify=False).create_ssl_context()

        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_contexts_not_shared(self):
        config = SSLConfig(verify=False, accepted_issuers=["Acme"])

        assert config.create_ssl_context() is not config.create_ssl_context()

    def test_custom_ca_file(self, acme_certificate):
        context = SSLConfig(ca_file=str(acme_certificate.cert_path)).create_ssl_context()

        assert context.verify_mode == ssl.CERT_REQUIRED

    def test_missing_ca_file(self, tmp_path):
        config = SSLConfig(ca_file=str(tmp_path / "missing.pem"))

        with pytest.raises(TrustPolicyError):
            config.create_ssl_context()


class TestUploaderConfig:
    """Test suite for UploaderConfig."""

    def test_defaults(self):
        config = UploaderConfig("https://example.com/upload")

        assert config.ssl.verify is True
        assert config.proxy is None
        assert config.uses_proxy is False
        assert config.requires_authentication is False
        assert config.is_https is True

    def test_reserved_additional_headers_dropped(self):
        config = UploaderConfig(
            "https://example.com/upload",
            additional_headers={
                "content-type": "text/plain",
                "Authorization": "Bearer x",
                "X-Tenant": "acme",
            }
        )

        assert config.additional_headers == {"X-Tenant": "acme"}

    def test_build_headers(self):
        config = UploaderConfig(
            "https://example.com/upload",
            additional_headers={"X-Tenant": "acme"}
        )

        headers = config.build_headers("BOUNDARY")

        assert headers == {
            "Connection": "Keep-Alive",
            "Cache-Control": "no-cache",
            "Content-Type": "multipart/form-data;boundary=BOUNDARY",
            "X-Tenant": "acme",
        }

    def test_build_headers_with_auth(self):
        config = UploaderConfig("https://example.com", username="user", password="pass")

        headers = config.build_headers("B")

        assert headers["Authorization"] == "Basic dXNlcjpwYXNz"
        assert "Content-Length" not in headers

    def test_basic_auth_without_password(self):
        assert build_basic_auth("user", None) == "Basic dXNlcjo="

    def test_basic_auth_no_deprecation_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert build_basic_auth("user", "pass") == "Basic dXNlcjpwYXNz"

    def test_insecure(self):
        config = UploaderConfig.insecure("https://example.com", ["Acme"], username="u")

        assert config.ssl.verify is False
        assert config.ssl.accepted_issuers == ["Acme"]
        assert config.username == "u"

    def test_with_proxy(self):
        config = UploaderConfig.with_proxy("https://example.com", "proxy.local", 3128)

        assert config.uses_proxy is True
        assert config.get_request_kwargs() == {"proxy": "http://proxy.local:3128"}

    def test_no_proxy_kwargs(self):
        assert UploaderConfig("https://example.com").get_request_kwargs() == {}

    def test_plain_http_has_no_ssl_context(self):
        config = UploaderConfig("http://example.com/upload")

        assert config.is_https is False
        assert config.create_ssl_context() is None

    def test_https_ssl_context_delegates(self):
        config = UploaderConfig.insecure("HTTPS://example.com")

        with patch.object(SSLConfig, "create_ssl_context", return_value="ctx") as create:
            assert config.create_ssl_context() == "ctx"

        create.assert_called_once()
