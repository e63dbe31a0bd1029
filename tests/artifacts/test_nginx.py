# tests/artifacts/test_nginx.py
"""
Testes da configuração do proxy reverso.

Os testes asseguram que:
- o bloco de compressão existe sse gzip está ligado, com o nível configurado
- a taxa do limit_req_zone é floor(max_requests / (window_ms / 60000)) por minuto
- o cabeçalho HSTS existe sse hsts está ligado
- TLS produz servidor de redirect + servidor 443; sem TLS, um único servidor HTTP
- os timeouts de proxy são fixos por location
"""

import pytest

from atlas_deploy.artifacts.model import (
    GzipCompression,
    NoCompression,
    RateLimitZone,
    rate_limit_zone_for,
)
from atlas_deploy.artifacts.nginx import _compression_lines, render_nginx_config
from atlas_deploy.core.config.schema import RateLimitPolicy


def test_gzip_on_renders_level(tree_with):
    conf = render_nginx_config(tree_with({"performance": {"compression": {"gzip": True, "level": 6}}}))
    assert "gzip on;" in conf
    assert "gzip_comp_level 6;" in conf


def test_gzip_off_omits_block_entirely(tree_with):
    conf = render_nginx_config(tree_with({"performance": {"compression": {"gzip": False}}}))
    assert "gzip" not in conf


def test_default_rate_limit_is_six_per_minute(default_tree):
    # 100 requisições por janela de 15 minutos
    conf = render_nginx_config(default_tree)
    assert "limit_req_zone $binary_remote_addr zone=api:10m rate=6r/m;" in conf
    assert "limit_req zone=api burst=20 nodelay;" in conf


@pytest.mark.parametrize(
    "window_ms, max_requests, expected",
    [
        (60000, 100, 100),
        (900000, 100, 6),
        (30000, 10, 20),
        (3600000, 1, 1),
    ],
)
def test_rate_limit_arithmetic(window_ms, max_requests, expected):
    zone = rate_limit_zone_for(RateLimitPolicy(window_ms=window_ms, max_requests=max_requests))
    assert zone == RateLimitZone(requests_per_minute=expected)


def test_rate_limit_rejects_non_positive_window():
    with pytest.raises(ValueError):
        rate_limit_zone_for(RateLimitPolicy(window_ms=0, max_requests=10))


def test_hsts_header_toggle(tree_with):
    on = render_nginx_config(tree_with({"security": {"ssl": {"hsts": True, "hsts_max_age": 600}}}))
    off = render_nginx_config(tree_with({"security": {"ssl": {"hsts": False}}}))

    assert 'Strict-Transport-Security "max-age=600; includeSubDomains; preload"' in on
    assert "Strict-Transport-Security" not in off


def test_tls_listener_redirects_and_terminates(default_tree):
    conf = render_nginx_config(default_tree)

    assert conf.count("server {") == 2
    assert "return 301 https://$server_name$request_uri;" in conf
    assert "listen 443 ssl http2;" in conf
    assert "ssl_certificate /etc/ssl/certs/icepaca.com.crt;" in conf
    assert "ssl_certificate_key /etc/ssl/private/icepaca.com.key;" in conf
    assert "ssl_protocols TLSv1.2 TLSv1.3;" in conf


def test_plain_http_single_server(tree_with):
    conf = render_nginx_config(tree_with({"security": {"ssl": {"enabled": False}}}))

    assert conf.count("server {") == 1
    assert "listen 80;" in conf
    assert "443" not in conf
    assert "ssl_certificate" not in conf


def test_proxy_timeouts_per_location(default_tree):
    conf = render_nginx_config(default_tree)
    api_block = conf.split("location /api/ {", 1)[1].split("}", 1)[0]
    default_block = conf.split("location / {", 1)[1].split("}", 1)[0]

    assert "proxy_read_timeout 30s;" in api_block
    assert "proxy_read_timeout 60s;" in default_block
    assert conf.count("proxy_connect_timeout 5s;") == 2
    assert "expires 1y;" in conf


def test_unknown_compression_variant_raises():
    assert _compression_lines(NoCompression()) == []
    assert "gzip_comp_level 9;" in _compression_lines(GzipCompression(level=9))
    with pytest.raises(TypeError):
        _compression_lines(object())  # type: ignore[arg-type]


def test_structure_is_balanced(default_tree):
    conf = render_nginx_config(default_tree)
    assert conf.startswith("events {\n")
    assert conf.endswith("}\n")
    assert conf.count("{") == conf.count("}")


def test_security_header_block(default_tree):
    conf = render_nginx_config(default_tree)
    lines = [line.strip() for line in conf.splitlines()]

    start = lines.index("add_header X-Frame-Options DENY always;")
    assert lines[start : start + 5] == [
        "add_header X-Frame-Options DENY always;",
        "add_header X-Content-Type-Options nosniff always;",
        'add_header X-XSS-Protection "1; mode=block" always;',
        'add_header Referrer-Policy "strict-origin-when-cross-origin" always;',
        'add_header Strict-Transport-Security "max-age=31536000; includeSubDomains; preload" always;',
    ]
    assert "SAMEORIGIN" not in conf


def test_tls_cipher_suite(default_tree):
    conf = render_nginx_config(default_tree)
    assert (
        "ssl_ciphers ECDHE-RSA-AES128-GCM-SHA256:ECDHE-RSA-AES256-GCM-SHA384:"
        "ECDHE-RSA-AES128-SHA256:ECDHE-RSA-AES256-SHA384;"
    ) in conf


@pytest.mark.parametrize(
    "directive",
    ["least_conn", "client_max_body_size", "use epoll", "multi_accept", "gzip_proxied", "proxy_cache_bypass"],
)
def test_only_expected_directives_are_emitted(default_tree, directive):
    assert directive not in render_nginx_config(default_tree)


def test_health_location_proxies_to_health_endpoint(default_tree):
    conf = render_nginx_config(default_tree)
    health_block = conf.split("location /health {", 1)[1].split("}", 1)[0]
    assert "proxy_pass http://app_backend/health;" in health_block
    assert "access_log off;" in health_block
